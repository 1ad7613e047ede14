# rbstraverse/utils/rbs_writer.py

import re

DIRECTIVE = "# resolve-type-names: false"
OPEN_RE = re.compile(r"^(class|module)\s+\S")
MIXIN_RE = re.compile(r"^(include|extend|prepend)\s+\S")
VISIBILITY = ("private", "public")


def classify(line: str) -> str:
    if line == "end":
        return "end"
    if line in VISIBILITY:
        return "visibility"
    if OPEN_RE.match(line):
        return "open"
    if MIXIN_RE.match(line):
        return "mixin"
    return "member"


class RbsWriter:
    """
    Normalises generated declarations: one directive at the top, two-space
    indentation per nesting level, blank lines between declarations and
    members (consecutive mixins stay together) and around visibility
    markers. Writing already written text returns it unchanged.
    """

    indent = "  "

    def write(self, text: str) -> str:
        out = [DIRECTIVE, ""]
        depth = 0
        prev = None

        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            kind = classify(line)
            if kind == "end":
                depth = max(depth - 1, 0)
                out.append(self.indent * depth + line)
                prev = kind
                continue

            if self.needs_blank_line(prev, kind, depth):
                out.append("")
            out.append(self.indent * depth + line)
            if kind == "open":
                depth += 1
            prev = kind

        return "\n".join(out) + "\n"

    def needs_blank_line(self, prev, kind, depth) -> bool:
        if prev is None or prev == "open":
            return False
        if depth == 0:
            return True
        if kind == "visibility" or prev == "visibility":
            return True
        if prev == "mixin" and kind == "mixin":
            return False
        return True


def write(text: str) -> str:
    return RbsWriter().write(text)
