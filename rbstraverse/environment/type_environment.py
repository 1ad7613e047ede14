# rbstraverse/environment/type_environment.py

import re

import networkx as nx

from rbstraverse.base.namespace import Namespace

CONCERN_MARKER = "::ActiveSupport::Concern"
BUILTIN_TYPES = {"bool", "untyped", "void", "nil", "top", "bot", "boolish"}
SELF_TYPES = {"self", "instance"}
TYPE_TOKEN_RE = re.compile(r"(?<![\w:@$])(?:::)?[A-Za-z_]\w*(?:::[A-Za-z_]\w*)*")


def absolute_name(name) -> str:
    ns = name if isinstance(name, Namespace) else Namespace.parse(name)
    return Namespace(ns.path, True).name


class TypeEnvironment:
    """
    Read-mostly database of known Ruby classes and modules.

    Populated from RBS signatures and Ruby sources, finalised once with
    `resolve_type_names()`, then only queried. Nodes of the underlying
    MultiDiGraph are absolute type names; edges are keyed by relation
    (`inherits`, `includes`, `extends`) and carry their declaration order.
    """

    def __init__(self):
        self.graph = nx.MultiDiGraph()

    # -- population --------------------------------------------------------

    def add_declaration(self, name, kind, superclass=None, context=None,
                        type_params=(), concern=False):
        name = absolute_name(name)
        if name not in self.graph:
            self.graph.add_node(
                name,
                kind=kind,
                superclass_ref=None,
                superclass=None,
                type_params=tuple(type_params),
                methods={},
                singleton_methods={},
                aliases={},
                singleton_aliases={},
                ivars={},
                singleton_ivars={},
                mixin_refs=[],
                extends=[],
                concern=concern,
            )
        data = self.graph.nodes[name]
        if superclass is not None and data["superclass_ref"] is None:
            data["superclass_ref"] = (superclass, context or Namespace.parse(name).parent)
        if type_params and not data["type_params"]:
            data["type_params"] = tuple(type_params)
        data["concern"] = data["concern"] or concern
        return name

    def add_method(self, owner, name, method_types, singleton=False):
        data = self._node(owner)
        table = data["singleton_methods" if singleton else "methods"]
        table.setdefault(name, []).extend(method_types)

    def add_alias(self, owner, new_name, old_name, singleton=False):
        data = self._node(owner)
        data["singleton_aliases" if singleton else "aliases"][new_name] = old_name

    def add_ivar(self, owner, name, type_text, singleton=False):
        data = self._node(owner)
        data["singleton_ivars" if singleton else "ivars"][name] = type_text

    def add_mixin(self, owner, relation, ref, context=None):
        if relation not in ("includes", "extends"):
            raise ValueError(f"Unknown mixin relation: {relation}")
        data = self._node(owner)
        ref = ref if isinstance(ref, Namespace) else Namespace.parse(ref)
        data["mixin_refs"].append((relation, ref, context or Namespace.parse(absolute_name(owner))))

    def resolve_type_names(self):
        """Resolve superclass and mixin references into graph edges."""
        self.graph.remove_edges_from(list(self.graph.edges(keys=True)))
        for name, data in self.graph.nodes(data=True):
            data["extends"] = []
            data["superclass"] = self._resolve_superclass(name, data)
            if data["superclass"] in self.graph:
                self.graph.add_edge(name, data["superclass"], key="inherits", order=0)

            for order, (relation, ref, context) in enumerate(data["mixin_refs"]):
                target = self.resolve_type_name(ref, context) or absolute_name(ref)
                if relation == "extends":
                    data["extends"].append(target)
                if target in self.graph and target != name:
                    self.graph.add_edge(name, target, key=relation, order=order)

    def _resolve_superclass(self, name, data):
        if data["kind"] != "class" or name == "::BasicObject":
            return None
        if data["superclass_ref"] is not None:
            ref, context = data["superclass_ref"]
            return self.resolve_type_name(ref, context) or absolute_name(ref)
        if name == "::Object":
            return "::BasicObject"
        return "::Object"

    def _node(self, name):
        name = absolute_name(name)
        if name not in self.graph:
            raise KeyError(f"Unknown type: {name}")
        return self.graph.nodes[name]

    # -- queries -----------------------------------------------------------

    def has_type(self, name) -> bool:
        return absolute_name(name) in self.graph

    def kind_of(self, name):
        name = absolute_name(name)
        return self.graph.nodes[name]["kind"] if name in self.graph else None

    def superclass_of(self, name):
        name = absolute_name(name)
        return self.graph.nodes[name]["superclass"] if name in self.graph else None

    def type_params_of(self, name):
        name = absolute_name(name)
        return self.graph.nodes[name]["type_params"] if name in self.graph else ()

    def is_concern(self, name) -> bool:
        name = absolute_name(name)
        if name not in self.graph:
            return False
        data = self.graph.nodes[name]
        return data["concern"] or CONCERN_MARKER in data["extends"]

    def resolve_type_name(self, ref, context=None):
        """Absolute name `ref` denotes when written inside `context`, or None."""
        ref = ref if isinstance(ref, Namespace) else Namespace.parse(ref)
        if ref.is_empty:
            return None
        if ref.absolute:
            return ref.name if ref.name in self.graph else None

        context = Namespace((context or Namespace.root()).path, True)
        for level in context.outward():
            candidate = (level + ref).name
            if candidate in self.graph:
                return candidate
        return None

    def mixins(self, name, relation):
        edges = [
            (data["order"], target)
            for _, target, key, data in self.graph.out_edges(name, keys=True, data=True)
            if key == relation
        ]
        return [target for _, target in sorted(edges)]

    def _module_chain(self, name, seen):
        if name in seen:
            return []
        seen.add(name)
        chain = [name]
        # the last included module is searched first
        for mod in reversed(self.mixins(name, "includes")):
            chain.extend(a for a in self._module_chain(mod, seen) if a not in chain)
        return chain

    def ancestors(self, name):
        """Instance method lookup order."""
        result = []
        seen = set()
        current = absolute_name(name)
        while current is not None and current in self.graph and current not in seen:
            for anc in self._module_chain(current, set()):
                if anc not in result:
                    result.append(anc)
            seen.add(current)
            current = self.graph.nodes[current]["superclass"]
        return result

    def singleton_ancestors(self, name):
        """Singleton method lookup order as (type name, on_singleton) pairs."""
        result = []
        seen = set()
        start = absolute_name(name)
        current = start
        while current is not None and current in self.graph and current not in seen:
            seen.add(current)
            result.append((current, True))
            for mod in reversed(self.mixins(current, "extends")):
                for anc in self._module_chain(mod, set()):
                    if (anc, False) not in result:
                        result.append((anc, False))
            current = self.graph.nodes[current]["superclass"]

        meta = "::Class" if self.kind_of(start) == "class" else "::Module"
        for anc in self.ancestors(meta):
            if (anc, False) not in result:
                result.append((anc, False))
        return result

    def lookup_method(self, name, method, singleton=False):
        """(owner, method types) for the first definition found, or None."""
        name = absolute_name(name)
        if name not in self.graph:
            return None
        if singleton:
            chain = self.singleton_ancestors(name)
        else:
            chain = [(anc, False) for anc in self.ancestors(name)]

        for owner, on_singleton in chain:
            data = self.graph.nodes[owner]
            table = data["singleton_methods" if on_singleton else "methods"]
            if method in table:
                return owner, list(table[method])
            aliases = data["singleton_aliases" if on_singleton else "aliases"]
            if method in aliases and aliases[method] != method:
                return self.lookup_method(owner, aliases[method], singleton=on_singleton)
        return None

    def lookup_ivar(self, name, ivar, singleton=False):
        name = absolute_name(name)
        if name not in self.graph:
            return None
        for owner in self.ancestors(name):
            ivars = self.graph.nodes[owner]["singleton_ivars" if singleton else "ivars"]
            if ivar in ivars:
                return owner, ivars[ivar]
        return None

    def resolve_type(self, type_text, owner, extra_params=()):
        """
        Rewrite `type_text`, written inside `owner`, with absolute type names.

        Returns None when the type cannot be expressed outside its
        declaration: type variables, aliases, interfaces, string literals,
        `self` in a compound type or names unknown to the environment.
        """
        text = (type_text or "").strip()
        if not text:
            return None
        owner = absolute_name(owner)
        if text in BUILTIN_TYPES:
            return text
        if text in SELF_TYPES:
            return None if self.type_params_of(owner) else owner
        if any(q in text for q in ('"', "'", "`")):
            return None

        params = set(self.type_params_of(owner)) | set(extra_params)
        context = Namespace.parse(owner)
        failed = []

        def replace(match):
            token = match.group(0)
            if token in BUILTIN_TYPES or token == "singleton":
                return token
            ref = Namespace.parse(token)
            if not all(p[0].isupper() for p in ref.path):
                failed.append(token)
                return token
            if not ref.absolute and token in params:
                failed.append(token)
                return token
            resolved = self.resolve_type_name(ref, context)
            if resolved is None:
                failed.append(token)
                return token
            return resolved

        rewritten = TYPE_TOKEN_RE.sub(replace, text)
        return None if failed else rewritten
