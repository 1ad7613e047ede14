from dataclasses import dataclass
from typing import Iterator, Tuple


@dataclass(frozen=True)
class Namespace:
    """Nesting path of a Ruby class/module, e.g. ``::A::B``."""

    path: Tuple[str, ...] = ()
    absolute: bool = True

    @classmethod
    def parse(cls, text: str) -> "Namespace":
        text = text.strip()
        absolute = text.startswith("::")
        parts = tuple(p for p in text.split("::") if p)
        if not parts:
            return cls.root()
        return cls(parts, absolute)

    @classmethod
    def root(cls) -> "Namespace":
        return cls((), True)

    @property
    def is_empty(self) -> bool:
        return not self.path

    @property
    def parent(self) -> "Namespace":
        if not self.path:
            return self
        return Namespace(self.path[:-1], self.absolute)

    @property
    def name(self) -> str:
        joined = "::".join(self.path)
        return f"::{joined}" if self.absolute and self.path else joined

    def append(self, segment: str) -> "Namespace":
        return Namespace(self.path + (segment,), self.absolute)

    def __add__(self, other: "Namespace") -> "Namespace":
        if other.absolute:
            return other
        return Namespace(self.path + other.path, self.absolute)

    def outward(self) -> Iterator["Namespace"]:
        # constant lookup order: innermost first, root last
        ns = self
        while True:
            yield ns
            if ns.is_empty:
                return
            ns = ns.parent

    def segments(self):
        return [Namespace(self.path[:i], self.absolute).name for i in range(1, len(self.path) + 1)]

    def __str__(self) -> str:
        return self.name
