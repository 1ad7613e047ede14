# rbstraverse/extractors/ruby_definition_extractor.py

from rbstraverse.base.namespace import Namespace
from rbstraverse.base.source_extractor import SourceExtractor
from rbstraverse.extractors.ruby_nodes import (
    DEFINITION_TYPES,
    body_statements,
    call_arguments,
    constant_path,
    definition_namespace,
    receiverless_call,
    superclass_ref,
)

MIXIN_RELATIONS = {"include": "includes", "extend": "extends", "prepend": "includes"}


class RubyDefinitionExtractor(SourceExtractor):
    """
    Indexes the classes and modules a Ruby source defines into a
    TypeEnvironment: kind, superclass reference, include/extend at body
    level, the concern marker and `class_methods do` companions.
    """

    def __init__(self, env):
        super().__init__()
        self.env = env
        self.definitions = []

    def process_source(self, source: bytes, file_path: str = "<memory>"):
        tree = self.parse(source)
        self.definitions = []
        self.walk_body(tree.root_node, Namespace.root(), file_path)
        return self.definitions

    def extract_all_components(self):
        return self.definitions

    def walk_body(self, node, namespace: Namespace, file_path: str):
        for stmt in body_statements(node):
            if stmt.type in DEFINITION_TYPES:
                self.visit_definition(stmt, namespace, file_path)
            elif not namespace.is_empty and stmt.type == "call":
                self.visit_call(stmt, namespace)

    def visit_definition(self, node, enclosing: Namespace, file_path: str):
        namespace = definition_namespace(node, enclosing)
        if namespace is None:
            return

        superclass = superclass_ref(node) if node.type == "class" else None
        self.env.add_declaration(
            namespace.name,
            node.type,
            superclass=superclass,
            context=enclosing,
        )
        self.definitions.append({
            "kind": node.type,
            "name": namespace.name,
            "superclass": superclass.name if superclass else None,
            "file_path": file_path,
            "start_line": node.start_point[0] + 1,
            "end_line": node.end_point[0] + 1,
        })
        self.walk_body(node, namespace, file_path)

    def visit_call(self, node, namespace: Namespace):
        name = receiverless_call(node)
        if name in MIXIN_RELATIONS:
            for arg in call_arguments(node):
                ref = constant_path(arg)
                if ref is not None:
                    self.env.add_mixin(namespace.name, MIXIN_RELATIONS[name], ref, context=namespace)
        elif name == "class_methods" and node.child_by_field_name("block") is not None:
            # ActiveSupport::Concern.class_methods defines <mod>::ClassMethods
            self.env.add_declaration(namespace.append("ClassMethods").name, "module", context=namespace)
