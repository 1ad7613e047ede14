# rbstraverse/environment/rbs_types.py
#
# Small, bracket-aware helpers over RBS method type text.

import re

ANNOTATION_RE = re.compile(r"^%a(\{[^}]*\}|\([^)]*\)|\[[^\]]*\]|<[^>]*>|\|[^|]*\|)\s*")
OPENERS = "([{"
CLOSERS = ")]}"


def bracket_depth(text: str) -> int:
    depth = 0
    for ch in text:
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
    return depth


def split_top_level(text: str, sep: str):
    parts = []
    depth = 0
    current = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        if depth == 0 and text.startswith(sep, i):
            parts.append("".join(current))
            current = []
            i += len(sep)
            continue
        current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def strip_annotations(text: str) -> str:
    text = text.strip()
    while True:
        m = ANNOTATION_RE.match(text)
        if not m:
            return text
        text = text[m.end():].strip()


def split_overloads(text: str):
    overloads = []
    for part in split_top_level(text, "|"):
        part = strip_annotations(part)
        if part and part != "...":
            overloads.append(part)
    return overloads


def method_type_params(method_type: str):
    """Names bound by a leading `[T, U < Foo]` on a method type."""
    text = method_type.strip()
    if not text.startswith("["):
        return ()
    close = _matching_close(text, 0)
    if close < 0:
        return ()
    return tuple(
        p.split()[0]
        for p in split_top_level(text[1:close], ",")
        if p.strip()
    )


def return_type_of(method_type: str):
    text = method_type.strip()
    if text.startswith("["):
        close = _matching_close(text, 0)
        if close < 0:
            return None
        text = text[close + 1:]
    parts = split_top_level(text, "->")
    if len(parts) < 2:
        return None
    # first top-level arrow belongs to the method; later ones to a proc return type
    return "->".join(parts[1:]).strip() or None


def declared_type_params(text: str):
    """`[unchecked out Elem, K < Foo]` -> ("Elem", "K")"""
    text = text.strip()
    if not text.startswith("[") or not text.endswith("]"):
        return ()
    names = []
    for part in split_top_level(text[1:-1], ","):
        words = [w for w in part.split() if w not in ("unchecked", "in", "out")]
        if words:
            names.append(words[0])
    return tuple(names)


def _matching_close(text: str, start: int) -> int:
    depth = 0
    for i in range(start, len(text)):
        if text[i] in OPENERS:
            depth += 1
        elif text[i] in CLOSERS:
            depth -= 1
            if depth == 0:
                return i
    return -1
