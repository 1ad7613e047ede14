# rbstraverse/builder/declaration_builder.py

import sys

from rbstraverse.base.macro_call import MacroKind
from rbstraverse.resolvers.method_resolver import UNTYPED


class DeclarationBuilder:
    """
    Turns the macro calls of one namespace into RBS method declarations.

    `build` returns `(public, private)`: one newline-joined string per call,
    in call order, in the group matching the call's visibility. Calls that
    produce no declarations are left out.
    """

    def __init__(self, method_resolver, mixin_resolver):
        self.method_resolver = method_resolver
        self.mixin_resolver = mixin_resolver
        self.builders = {
            MacroKind.DELEGATE: self.build_delegate,
            MacroKind.CLASS_ATTRIBUTE: self.build_class_attribute,
            MacroKind.ATTR_ACCESSOR: self.build_attr_accessor,
            MacroKind.ATTR_READER: self.build_attr_reader,
            MacroKind.ATTR_WRITER: self.build_attr_writer,
            MacroKind.INCLUDE: self.build_include,
        }

    def build(self, namespace, method_calls):
        public_decls = []
        private_decls = []
        for call in method_calls:
            lines = self.builders[call.kind](namespace, call)
            if not lines:
                continue
            decl = "\n".join(lines)
            if call.private:
                private_decls.append(decl)
            else:
                public_decls.append(decl)
        return public_decls, private_decls

    def build_delegate(self, namespace, call):
        lines = []
        for name in call.names:
            return_type = self.method_resolver.resolve_delegate(namespace, call.target, name)
            lines.append(f"def {delegate_method_name(call, name)}: () -> {return_type}")
        return lines

    def build_class_attribute(self, namespace, call):
        opts = call.options
        lines = []
        for name in call.names:
            lines.append(f"def self.{name}: () -> {UNTYPED}")
            lines.append(f"def self.{name}=: ({UNTYPED}) -> {UNTYPED}")
            if opts.instance_predicate:
                lines.append(f"def self.{name}?: () -> bool")
            if not opts.instance_accessor:
                continue
            if opts.instance_reader:
                lines.append(f"def {name}: () -> {UNTYPED}")
            if opts.instance_writer:
                lines.append(f"def {name}=: ({UNTYPED}) -> {UNTYPED}")
            if opts.instance_reader and opts.instance_predicate:
                lines.append(f"def {name}?: () -> bool")
        return lines

    def build_attr_accessor(self, namespace, call):
        lines = []
        for name in call.names:
            lines.append(f"def self.{name}: () -> {UNTYPED}")
            lines.append(f"def self.{name}=: ({UNTYPED}) -> {UNTYPED}")
            if instance_reader(call):
                lines.append(f"def {name}: () -> {UNTYPED}")
            if instance_writer(call):
                lines.append(f"def {name}=: ({UNTYPED}) -> {UNTYPED}")
        return lines

    def build_attr_reader(self, namespace, call):
        lines = []
        for name in call.names:
            lines.append(f"def self.{name}: () -> {UNTYPED}")
            if instance_reader(call):
                lines.append(f"def {name}: () -> {UNTYPED}")
        return lines

    def build_attr_writer(self, namespace, call):
        lines = []
        for name in call.names:
            lines.append(f"def self.{name}=: ({UNTYPED}) -> {UNTYPED}")
            if instance_writer(call):
                lines.append(f"def {name}=: ({UNTYPED}) -> {UNTYPED}")
        return lines

    def build_include(self, namespace, call):
        lines = []
        for module_path in call.modules:
            mixin = self.mixin_resolver.resolve(namespace, module_path)
            if mixin is None:
                print(
                    f"Unable to resolve module {module_path.name} included in {namespace.name}"
                    f" ({call.location}). Skipping it.",
                    file=sys.stderr,
                )
                continue
            lines.append(f"include {mixin.name.name}")
            if mixin.concern and mixin.class_methods:
                lines.append(f"extend {mixin.name.name}::ClassMethods")
        return lines


def delegate_method_name(call, name: str) -> str:
    prefix = call.options.prefix
    if prefix is True:
        return f"{call.target}_{name}"
    if prefix:
        return f"{prefix}_{name}"
    return name


def instance_reader(call) -> bool:
    return call.options.instance_accessor and call.options.instance_reader


def instance_writer(call) -> bool:
    return call.options.instance_accessor and call.options.instance_writer
