from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from rbstraverse.base.namespace import Namespace


class MacroKind(Enum):
    DELEGATE = "delegate"
    CLASS_ATTRIBUTE = "class_attribute"
    ATTR_ACCESSOR = "attr_accessor"
    ATTR_READER = "attr_reader"
    ATTR_WRITER = "attr_writer"
    INCLUDE = "include"


BOOLEAN_OPTIONS = (
    "instance_accessor",
    "instance_reader",
    "instance_writer",
    "instance_predicate",
    "allow_nil",
    "private",
)

OPTION_KEYS = frozenset(BOOLEAN_OPTIONS + ("to", "prefix", "default"))


@dataclass(frozen=True)
class MacroOptions:
    """Flags read from a macro's trailing option hash."""

    instance_accessor: bool = True
    instance_reader: bool = True
    instance_writer: bool = True
    instance_predicate: bool = True
    prefix: Union[None, bool, str] = None
    allow_nil: bool = False
    private: bool = False
    has_default: bool = False

    @classmethod
    def from_mapping(cls, options: dict) -> "MacroOptions":
        unknown = set(options) - OPTION_KEYS
        if unknown:
            raise ValueError(f"Unknown macro options: {sorted(unknown)}")

        values = {}
        for key in BOOLEAN_OPTIONS:
            if key in options:
                values[key] = bool(options[key])
        prefix = options.get("prefix")
        if prefix is True or isinstance(prefix, str):
            values["prefix"] = prefix
        values["has_default"] = "default" in options
        return cls(**values)


@dataclass(frozen=True)
class MacroCall:
    kind: MacroKind
    method_name: str
    names: Tuple[str, ...] = ()
    options: MacroOptions = field(default_factory=MacroOptions)
    target: Optional[str] = None
    modules: Tuple[Namespace, ...] = ()
    private: bool = False
    namespace: Namespace = field(default_factory=Namespace.root)
    line: int = 0
    file_path: Optional[str] = None

    @property
    def location(self) -> str:
        return f"{self.file_path or '<memory>'}:{self.line}"

    @property
    def public(self) -> bool:
        return not self.private

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "method": self.method_name,
            "names": list(self.names),
            "target": self.target,
            "modules": [m.name for m in self.modules],
            "options": {
                "instance_accessor": self.options.instance_accessor,
                "instance_reader": self.options.instance_reader,
                "instance_writer": self.options.instance_writer,
                "instance_predicate": self.options.instance_predicate,
                "prefix": self.options.prefix,
                "allow_nil": self.options.allow_nil,
            },
            "private": self.private,
            "namespace": self.namespace.name,
            "line": self.line,
        }
