# rbstraverse/environment/signature_loader.py

import os
import re

from rbstraverse.base.namespace import Namespace
from rbstraverse.environment.rbs_types import bracket_depth, declared_type_params, strip_annotations

CONST_PATH = r"(?:::)?[A-Z]\w*(?:::[A-Z]\w*)*"

DECL_RE = re.compile(r"^(class|module|interface)\s+(.*)$")
CLASS_HEAD_RE = re.compile(
    rf"^(?P<name>{CONST_PATH})\s*(?P<params>\[.*?\])?\s*(?:<\s*(?P<super>{CONST_PATH}))?"
)
ALIAS_DECL_RE = re.compile(rf"^(?P<name>{CONST_PATH})\s*=\s*(?P<target>{CONST_PATH})\s*$")
DEF_RE = re.compile(r"^def\s+(?P<self>self\??\.)?(?P<name>`[^`]+`|[^\s:]+)\s*:\s*(?P<type>.*)$")
ATTR_RE = re.compile(
    r"^attr_(?P<kind>reader|writer|accessor)\s+(?P<self>self\.)?(?P<name>\w+[?!]?)"
    r"\s*(?:\((?P<ivar>@?\w*)\))?\s*:\s*(?P<type>.+)$"
)
IVAR_RE = re.compile(r"^(?P<self>self\.)?(?P<name>@\w+)\s*:\s*(?P<type>.+)$")
MIXIN_RE = re.compile(rf"^(?P<kind>include|extend|prepend)\s+(?P<name>{CONST_PATH})")
ALIAS_RE = re.compile(r"^alias\s+(?P<self>self\.)?(?P<new>\S+)\s+(?:self\.)?(?P<old>\S+)$")
VISIBILITY_RE = re.compile(r"^(private|public)\s+(?=def\b|attr_)")

MIXIN_RELATIONS = {"include": "includes", "prepend": "includes", "extend": "extends"}


class SignatureLoader:
    """
    Line oriented reader for RBS signature files.

    Understands the declarations needed to answer method and constant
    lookups (classes, modules, methods, attributes, instance variables,
    mixins, aliases). Lines it cannot interpret are skipped.
    """

    def __init__(self, env):
        self.env = env
        self.loaded_files = []

    def load_directory(self, directory: str, exclude=()):
        exclude = [os.path.abspath(e) for e in exclude]
        for root, dirs, files in os.walk(directory):
            dirs[:] = sorted(
                d for d in dirs
                if os.path.abspath(os.path.join(root, d)) not in exclude
            )
            for fname in sorted(files):
                if fname.endswith(".rbs"):
                    self.load_path(os.path.join(root, fname))

    def load_path(self, path: str):
        if os.path.isdir(path):
            return self.load_directory(path)
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            self.load_text(f.read())
        self.loaded_files.append(path)

    def load_text(self, text: str):
        stack = []
        pending = None

        for raw in text.splitlines():
            line = raw.strip()
            if pending is not None:
                if (
                    line.startswith(("|", "->"))
                    or not pending["type"].strip()
                    or bracket_depth(pending["type"]) > 0
                ):
                    pending["type"] += " " + line
                    continue
                self._flush(pending)
                pending = None

            if not line or line.startswith("#"):
                continue
            line = strip_annotations(line)

            if line == "end":
                if stack:
                    stack.pop()
                continue

            owner = stack[-1] if stack else Namespace.root()

            m = DECL_RE.match(line)
            if m:
                namespace, has_body = self._declaration(m.group(1), m.group(2), owner)
                if has_body:
                    stack.append(namespace)
                continue

            if owner is None or owner.is_empty:
                # interface bodies and top-level members are not indexed;
                # type alias continuations are swallowed the same way
                if line.startswith("type "):
                    pending = {"owner": None, "type": line}
                continue

            line = VISIBILITY_RE.sub("", line)
            pending = self._member(line, owner)

        if pending is not None:
            self._flush(pending)

    def _declaration(self, keyword, rest, owner):
        alias = ALIAS_DECL_RE.match(rest)
        if alias:
            # `class Foo = Bar` has no body and no `end`
            if owner is not None:
                name = owner + Namespace.parse(alias.group("name"))
                target = Namespace.parse(alias.group("target"))
                if keyword == "class":
                    self.env.add_declaration(name.name, "class", superclass=target, context=owner)
                else:
                    self.env.add_declaration(name.name, "module", context=owner)
                    self.env.add_mixin(name.name, "includes", target, context=owner)
            return None, False

        if keyword == "interface" or owner is None:
            return None, True

        head = CLASS_HEAD_RE.match(rest)
        if not head:
            return None, True
        name = owner + Namespace.parse(head.group("name"))
        superclass = head.group("super") if keyword == "class" else None
        self.env.add_declaration(
            name.name,
            keyword,
            superclass=Namespace.parse(superclass) if superclass else None,
            context=owner,
            type_params=declared_type_params(head.group("params") or ""),
        )
        return name, True

    def _member(self, line, owner):
        m = DEF_RE.match(line)
        if m:
            name = m.group("name").strip("`")
            return {
                "owner": owner,
                "name": name,
                "singleton": m.group("self"),
                "type": m.group("type"),
            }

        if line.startswith("type "):
            return {"owner": None, "type": line}

        m = ATTR_RE.match(line)
        if m:
            self._attribute(m, owner)
            return None

        m = IVAR_RE.match(line)
        if m:
            self.env.add_ivar(owner.name, m.group("name"), m.group("type").strip(), singleton=bool(m.group("self")))
            return None

        m = MIXIN_RE.match(line)
        if m:
            self.env.add_mixin(owner.name, MIXIN_RELATIONS[m.group("kind")], Namespace.parse(m.group("name")), context=owner)
            return None

        m = ALIAS_RE.match(line)
        if m:
            self.env.add_alias(owner.name, m.group("new"), m.group("old"), singleton=bool(m.group("self")))
        return None

    def _attribute(self, m, owner):
        name = m.group("name")
        type_text = m.group("type").strip()
        singleton = bool(m.group("self"))
        kind = m.group("kind")
        if kind in ("reader", "accessor"):
            self.env.add_method(owner.name, name, [f"() -> {type_text}"], singleton=singleton)
        if kind in ("writer", "accessor"):
            self.env.add_method(owner.name, f"{name}=", [f"({type_text}) -> {type_text}"], singleton=singleton)

        ivar = m.group("ivar")
        if ivar is None:
            ivar = f"@{name}"
        if ivar:
            self.env.add_ivar(owner.name, ivar if ivar.startswith("@") else f"@{ivar}", type_text, singleton=singleton)

    def _flush(self, pending):
        if pending["owner"] is None:
            return
        method_type = pending["type"].strip()
        if not method_type:
            return
        prefix = pending["singleton"]
        if prefix in (None, "self?."):
            self.env.add_method(pending["owner"].name, pending["name"], [method_type])
        if prefix in ("self.", "self?."):
            self.env.add_method(pending["owner"].name, pending["name"], [method_type], singleton=True)
