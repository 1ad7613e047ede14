# rbstraverse/builder/namespace_formatter.py

from rbstraverse.base.namespace import Namespace


class NamespaceFormatter:
    """Wraps declarations in the class/module chain of their namespace."""

    def __init__(self, env):
        self.env = env

    def header(self, namespace: Namespace) -> str:
        lines = []
        for name in namespace.segments():
            kind = self.env.kind_of(name)
            if kind == "class":
                superclass = self.env.superclass_of(name) or "::Object"
                lines.append(f"class {name} < {superclass}")
            elif kind == "module":
                lines.append(f"module {name}")
            else:
                raise LookupError(f"Unknown class or module: {name}")
        return "\n".join(lines)

    def footer(self, namespace: Namespace) -> str:
        return "\n".join("end" for _ in namespace.path)

    def format(self, namespace: Namespace, public_decls, private_decls) -> str:
        parts = [self.header(namespace), *public_decls]
        if private_decls:
            parts.append("private")
            parts.extend(private_decls)
        parts.append(self.footer(namespace))
        return "\n".join(parts) + "\n"
