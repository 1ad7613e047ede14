# rbstraverse/extractors/ruby_macro_extractor.py

import re

from rbstraverse.base.macro_call import MacroCall, MacroKind, MacroOptions, BOOLEAN_OPTIONS, OPTION_KEYS
from rbstraverse.base.namespace import Namespace
from rbstraverse.base.source_extractor import SourceExtractor
from rbstraverse.extractors.ruby_nodes import (
    DEFINITION_TYPES,
    body_statements,
    call_arguments,
    constant_path,
    definition_namespace,
    hash_key,
    literal_value,
    node_text,
    receiverless_call,
)
from rbstraverse.registry.macro_registry import VISIBILITY_KEYWORDS, get_macro_kind, is_macro

ATTRIBUTE_NAME_RE = re.compile(r"^[A-Za-z_]\w*$")


class RubyMacroExtractor(SourceExtractor):
    """
    Collects ActiveSupport macro calls (delegate, class_attribute, cattr_*,
    mattr_*, include) per class/module body.

    A call that cannot be decoded statically is dropped; the rest of the
    file is still extracted.
    """

    def __init__(self):
        super().__init__()
        self.method_calls = {}
        self.file_path = None

    def process_source(self, source: bytes, file_path: str = "<memory>"):
        tree = self.parse(source)
        if tree.root_node.has_error:
            raise ValueError(f"Syntax error in {file_path}")
        self.method_calls = {}
        self.file_path = file_path
        self.walk_body(tree.root_node, Namespace.root())
        return self.method_calls

    def extract_all_components(self):
        return [
            call.to_dict()
            for calls in self.method_calls.values()
            for call in calls
        ]

    def walk_body(self, node, namespace: Namespace):
        private = False
        for stmt in body_statements(node):
            if stmt.type in DEFINITION_TYPES:
                inner = definition_namespace(stmt, namespace)
                if inner is not None:
                    self.walk_body(stmt, inner)
                continue

            if namespace.is_empty:
                continue

            visibility = self.visibility_change(stmt)
            if visibility is not None:
                private = visibility
                continue

            call = self.parse_call(stmt, namespace, private)
            if call is not None:
                self.method_calls.setdefault(namespace, []).append(call)

    def visibility_change(self, node):
        if node.type == "identifier":
            return VISIBILITY_KEYWORDS.get(node_text(node))
        name = receiverless_call(node)
        if name in VISIBILITY_KEYWORDS and node.child_by_field_name("arguments") is None:
            return VISIBILITY_KEYWORDS[name]
        return None

    def parse_call(self, node, namespace: Namespace, private: bool):
        name = receiverless_call(node)
        if not name or not is_macro(name):
            return None
        kind = get_macro_kind(name)

        try:
            positional, options = self.split_arguments(call_arguments(node))
            if kind is MacroKind.INCLUDE:
                return self.include_call(name, positional, options, namespace, private, node)
            if kind is MacroKind.DELEGATE:
                return self.delegate_call(name, positional, options, namespace, private, node)
            return self.attribute_call(kind, name, positional, options, namespace, private, node)
        except ValueError:
            return None

    def split_arguments(self, args):
        if not args:
            raise ValueError("Macro call without arguments")

        pairs = []
        while args and args[-1].type == "pair":
            pairs.insert(0, args.pop())
        if not pairs and args and args[-1].type == "hash":
            candidate = [c for c in args[-1].named_children if c.type != "comment"]
            if candidate and all(c.type == "pair" for c in candidate):
                keys = {hash_key(c) for c in candidate}
                if keys <= OPTION_KEYS:
                    pairs = candidate
                    args.pop()

        options = {}
        for pair in pairs:
            key = hash_key(pair)
            if key not in OPTION_KEYS:
                raise ValueError(f"Unknown option: {key}")
            if key == "default":
                options[key] = None
                continue
            value_node = pair.child_by_field_name("value")
            if value_node is None:
                # `to:` shorthand without a value
                raise ValueError(f"Option without value: {key}")
            try:
                options[key] = literal_value(value_node)
            except ValueError:
                if key not in BOOLEAN_OPTIONS:
                    raise
                options[key] = True

        for arg in args:
            if arg.type in ("pair", "splat_argument", "hash_splat_argument", "block_argument"):
                raise ValueError(f"Unsupported argument: {node_text(arg)}")
        return args, options

    def method_names(self, positional, pattern=None):
        names = []
        for arg in positional:
            value = literal_value(arg)
            if not isinstance(value, str) or not value:
                raise ValueError(f"Invalid method name: {node_text(arg)}")
            if pattern is not None and not pattern.match(value):
                raise ValueError(f"Invalid attribute name: {value}")
            names.append(value)
        if not names:
            raise ValueError("No method names given")
        return tuple(names)

    def delegate_call(self, name, positional, options, namespace, private, node):
        target = options.get("to")
        if not isinstance(target, str) or not target:
            raise ValueError("delegate requires a `to:` target")
        if options.get("prefix") is True and target.startswith("@"):
            raise ValueError("Cannot derive a prefix from an instance variable target")

        opts = MacroOptions.from_mapping(options)
        return MacroCall(
            kind=MacroKind.DELEGATE,
            method_name=name,
            names=self.method_names(positional),
            options=opts,
            target=target,
            private=private or opts.private,
            namespace=namespace,
            line=node.start_point[0] + 1,
            file_path=self.file_path,
        )

    def attribute_call(self, kind, name, positional, options, namespace, private, node):
        return MacroCall(
            kind=kind,
            method_name=name,
            names=self.method_names(positional, ATTRIBUTE_NAME_RE),
            options=MacroOptions.from_mapping(options),
            private=private,
            namespace=namespace,
            line=node.start_point[0] + 1,
            file_path=self.file_path,
        )

    def include_call(self, name, positional, options, namespace, private, node):
        if options or not positional:
            raise ValueError("include takes module references only")
        modules = []
        for arg in positional:
            ref = constant_path(arg)
            if ref is None:
                raise ValueError(f"Not a module reference: {node_text(arg)}")
            modules.append(ref)
        return MacroCall(
            kind=MacroKind.INCLUDE,
            method_name=name,
            modules=tuple(modules),
            private=private,
            namespace=namespace,
            line=node.start_point[0] + 1,
            file_path=self.file_path,
        )
