"""Locating doc comments and classifying their lines.

This is the lexical phase of comment parsing: raw source text in, a list of
``CommentLine`` values out. Dialect parsers only ever see ``CommentLine``.
"""

import re
from dataclasses import dataclass
from functools import cached_property

_BULLET = re.compile(r"^[-*+](\s+|$)")
PROPERTY_LINE = re.compile(r"^([A-Za-z][\w \-]*?)\s*:\s*(.*)$")
PROPERTY_SANS_COLON = re.compile(r"^([A-Za-z][\w \-]*?)\W*$")

# Indented-list keywords after normalize_key(), mapped to grammar keywords.
KEYWORDS = {
    "body": "body",
    "request body": "body",
    "cookie": "cookie",
    "deprecated": "deprecated",
    "description": "description",
    "externaldoc": "externaldoc",
    "external doc": "externaldoc",
    "header": "header",
    "ignore": "ignore",
    "operationid": "operationid",
    "operation id": "operationid",
    "path": "path",
    "path parameter": "path",
    "query": "query",
    "query parameter": "query",
    "response": "response",
    "response header": "response header",
    "security": "security",
    "summary": "summary",
    "tag": "tag",
}


def normalize_key(key: str) -> str:
    """Lower-case a property key and drop its plural ``s``."""
    return " ".join(key.split()).lower().rstrip("s")


@dataclass(frozen=True)
class CommentLine:
    """One comment line with its comment markers and gutter removed."""

    text: str

    @property
    def indent(self) -> int:
        return len(self.text) - len(self.text.lstrip())

    @property
    def content(self) -> str:
        return self.text.strip()

    @property
    def trimmed(self) -> str:
        """Content without a leading list bullet."""
        return _BULLET.sub("", self.content, count=1)

    @property
    def is_blank(self) -> bool:
        return not self.content

    @property
    def is_directive(self) -> bool:
        return self.content.startswith("@")

    @cached_property
    def key_value(self) -> tuple[str, str] | None:
        """The ``(key, value)`` pair of a ``Key: value`` line.

        A bare keyword such as ``Ignore`` counts as a property with an empty
        value.
        """
        trimmed = self.trimmed
        match = PROPERTY_LINE.match(trimmed)
        if match:
            return match.group(1), match.group(2).strip()
        match = PROPERTY_SANS_COLON.match(trimmed)
        if match and normalize_key(match.group(1)) in KEYWORDS:
            return match.group(1), ""
        return None

    @property
    def is_property(self) -> bool:
        return self.key_value is not None

    @property
    def is_keyword(self) -> bool:
        prop = self.key_value
        return prop is not None and normalize_key(prop[0]) in KEYWORDS


def _line_comment(lines: list[str]) -> list[str] | None:
    collected: list[str] = []
    for line in reversed(lines):
        stripped = line.strip()
        if stripped.startswith("//"):
            collected.append(stripped[2:].lstrip("/").rstrip())
        elif not stripped:
            continue
        else:
            break
    if not collected:
        return None
    collected.reverse()
    return collected


def _block_comment(before: str) -> list[str] | None:
    end = before.rfind("*/")
    if end < 0 or before[end + 2:].strip():
        return None
    start = before.rfind("/*", 0, end)
    if start < 0:
        return None
    lines = []
    for raw in before[start + 2:end].splitlines():
        line = raw.lstrip()
        # gutterless lines keep their indentation
        line = line[1:] if line.startswith("*") else raw
        lines.append(line.rstrip())
    return lines


def find_preceding_comment(text: str, offset: int) -> list[CommentLine]:
    """Find the comment directly above the line that contains ``offset``.

    Either a run of ``//`` lines (blank lines in between are fine) or a single
    ``/* ... */`` block with nothing but whitespace after it.
    """
    line_start = text.rfind("\n", 0, offset) + 1
    before = text[:line_start]
    raw = _line_comment(before.splitlines())
    if raw is None:
        raw = _block_comment(before)
    if raw is None:
        return []
    return [CommentLine(line) for line in raw]
