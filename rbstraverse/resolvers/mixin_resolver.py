# rbstraverse/resolvers/mixin_resolver.py

from dataclasses import dataclass

from rbstraverse.base.namespace import Namespace


@dataclass(frozen=True)
class ResolvedMixin:
    name: Namespace
    concern: bool
    class_methods: bool


class MixinResolver:
    """Resolves the module an `include` refers to the way Ruby looks up constants."""

    def __init__(self, env):
        self.env = env

    def module_name(self, context: Namespace, module_path: Namespace):
        if module_path.absolute:
            return module_path if self.env.has_type(module_path.name) else None

        for level in Namespace(context.path, True).outward():
            candidate = level + module_path
            if self.env.has_type(candidate.name):
                return candidate
        return None

    def resolve(self, context: Namespace, module_path: Namespace):
        name = self.module_name(context, module_path)
        if name is None:
            return None
        return ResolvedMixin(
            name=name,
            concern=self.env.is_concern(name.name),
            class_methods=self.env.has_type(name.append("ClassMethods").name),
        )
