# rbstraverse/resolvers/method_resolver.py

import re

from rbstraverse.base.namespace import Namespace
from rbstraverse.environment.rbs_types import method_type_params, return_type_of, split_overloads

UNTYPED = "untyped"

METHOD_NAME_RE = re.compile(r"^(?:[A-Za-z_]\w*[?!=]?|\[\]=?|[+\-*/%<>=!~^&|]+@?|\*\*)$")
IVAR_RE = re.compile(r"^@[A-Za-z_]\w*$")
CONSTANT_TARGET_RE = re.compile(r"^(?:::)?[A-Z]\w*(?:::[A-Z]\w*)*$")
SINGLETON_RE = re.compile(r"^singleton\((?P<name>(?:::[A-Z]\w*)+)\)$")
INSTANCE_RE = re.compile(r"^(?P<name>(?:::[A-Z]\w*)+)(?:\[.*\])?$")


class MethodTypeResolver:
    """
    Answers "what does `namespace#method_name` return?" from a
    TypeEnvironment. Every failure degrades to UNTYPED.
    """

    def __init__(self, env):
        self.env = env

    def resolve(self, namespace, method_name: str, singleton: bool = False) -> str:
        if not METHOD_NAME_RE.match(method_name or ""):
            return UNTYPED
        try:
            found = self.env.lookup_method(_name_of(namespace), method_name, singleton=singleton)
            if found is None:
                return UNTYPED
            owner, method_types = found
            return self._single_return_type(owner, method_types)
        except Exception:
            return UNTYPED

    def resolve_target(self, namespace, target: str) -> str:
        """Type of the receiver a delegation forwards to."""
        try:
            if target == "class":
                name = _name_of(namespace)
                return f"singleton({name})" if self.env.has_type(name) else UNTYPED
            if IVAR_RE.match(target):
                found = self.env.lookup_ivar(_name_of(namespace), target)
                if found is None:
                    return UNTYPED
                owner, type_text = found
                return self.env.resolve_type(type_text, owner) or UNTYPED
            if CONSTANT_TARGET_RE.match(target):
                context = namespace if isinstance(namespace, Namespace) else Namespace.parse(namespace)
                name = self.env.resolve_type_name(target, context)
                return f"singleton({name})" if name else UNTYPED
        except Exception:
            return UNTYPED
        return self.resolve(namespace, target)

    def resolve_delegate(self, namespace, target: str, method_name: str) -> str:
        receiver = self.resolve_target(namespace, target)
        if receiver == UNTYPED:
            return UNTYPED

        m = SINGLETON_RE.match(receiver)
        if m:
            return self.resolve(m.group("name"), method_name, singleton=True)
        m = INSTANCE_RE.match(receiver)
        if m:
            return self.resolve(m.group("name"), method_name)
        # optional, union, literal and interface receivers
        return UNTYPED

    def _single_return_type(self, owner, method_types) -> str:
        resolved = []
        for method_type in method_types:
            for overload in split_overloads(method_type):
                ret = return_type_of(overload)
                if ret is None:
                    return UNTYPED
                type_text = self.env.resolve_type(ret, owner, extra_params=method_type_params(overload))
                if type_text is None:
                    return UNTYPED
                if type_text not in resolved:
                    resolved.append(type_text)
        if len(resolved) != 1:
            return UNTYPED
        return resolved[0]


def _name_of(namespace) -> str:
    if isinstance(namespace, Namespace):
        return Namespace(namespace.path, True).name
    return namespace
