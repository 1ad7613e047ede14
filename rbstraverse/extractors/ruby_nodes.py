# rbstraverse/extractors/ruby_nodes.py
#
# Helpers over tree-sitter-ruby nodes shared by the macro extractor and the
# definition indexer.

import re

from tree_sitter import Node

from rbstraverse.base.namespace import Namespace

CONSTANT_RE = re.compile(r"^[A-Z]\w*$")
DEFINITION_TYPES = ("class", "module")


def node_text(node: Node) -> str:
    return node.text.decode("utf8", errors="replace")


def constant_path(node: Node):
    """`Foo`, `Foo::Bar` or `::Foo` as a Namespace, otherwise None."""
    if node is None or node.type not in ("constant", "scope_resolution"):
        return None
    text = "".join(node_text(node).split())
    ns = Namespace.parse(text)
    if ns.is_empty or not all(CONSTANT_RE.match(p) for p in ns.path):
        return None
    return ns


def definition_namespace(node: Node, enclosing: Namespace):
    name_node = node.child_by_field_name("name")
    ref = constant_path(name_node)
    if ref is None:
        return None
    return enclosing + ref


def superclass_ref(node: Node):
    sc = node.child_by_field_name("superclass")
    if sc is None:
        for c in node.named_children:
            if c.type == "superclass":
                sc = c
                break
    if sc is None or not sc.named_children:
        return None
    expr = sc.named_children[0]
    if expr.type == "element_reference":
        # ActiveRecord::Migration[7.1]
        expr = expr.child_by_field_name("object") or expr.named_children[0]
    return constant_path(expr)


def body_statements(node: Node):
    if node.type == "program":
        return list(node.named_children)
    body = node.child_by_field_name("body")
    if body is None:
        for c in node.named_children:
            if c.type == "body_statement":
                body = c
                break
    if body is not None:
        return list(body.named_children)

    name_node = node.child_by_field_name("name")
    skip = {(name_node.start_byte, name_node.end_byte)} if name_node else set()
    return [
        c for c in node.named_children
        if c.type != "superclass" and (c.start_byte, c.end_byte) not in skip
    ]


def receiverless_call(node: Node):
    """Method name of a `foo args` style call without receiver."""
    if node.type != "call" or node.child_by_field_name("receiver") is not None:
        return None
    method = node.child_by_field_name("method")
    if method is None:
        return None
    return node_text(method)


def call_arguments(node: Node):
    args = node.child_by_field_name("arguments")
    if args is None:
        return []
    return [c for c in args.named_children if c.type != "comment"]


def _string_content(node: Node) -> str:
    parts = []
    for c in node.named_children:
        if c.type == "interpolation":
            raise ValueError(f"Interpolated literal: {node_text(node)}")
        if c.type in ("string_content", "escape_sequence"):
            parts.append(node_text(c))
    return "".join(parts)


def literal_value(node: Node):
    """Decode a symbol/string/boolean/nil/constant literal or raise ValueError."""
    t = node.type
    if t == "simple_symbol":
        return node_text(node)[1:]
    if t in ("delimited_symbol", "string"):
        return _string_content(node)
    if t == "true":
        return True
    if t == "false":
        return False
    if t == "nil":
        return None
    if t in ("constant", "scope_resolution"):
        ref = constant_path(node)
        if ref is None:
            raise ValueError(f"Not a constant: {node_text(node)}")
        return ref.name
    raise ValueError(f"Not a literal: {node_text(node)}")


def hash_key(node: Node) -> str:
    key = node.child_by_field_name("key")
    if key is None:
        raise ValueError(f"Malformed pair: {node_text(node)}")
    if key.type == "hash_key_symbol":
        return node_text(key)
    value = literal_value(key)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported hash key: {node_text(key)}")
    return value
