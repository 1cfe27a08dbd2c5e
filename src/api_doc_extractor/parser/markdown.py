"""Indented-list dialect: a markdown-like property list.

    Get a list of books.

    Query parameters:
      - author [String] Filter by author
          pattern: [a-z ]+
    Responses:
      - 200 [Book]+ A list of books
      - 404 Nothing found

Leading prose is the summary. A plural key with no value opens a section
whose indented items each become one field; lines indented below an item
are its attributes.
"""

import logging

from .attributes import parse_attributes
from .base import DocumentationField, Summary
from .comments import KEYWORDS, CommentLine, normalize_key
from .grammar import TEXT_KEYWORDS, DirectiveError, build_field

logger = logging.getLogger(__name__)


def _collect_attributes(
    lines: list[CommentLine], index: int, indent: int
) -> tuple[dict[str, str], int]:
    collected = []
    while index < len(lines) and lines[index].indent > indent and lines[index].is_property:
        collected.append(lines[index].trimmed)
        index += 1
    return parse_attributes(collected), index


def _build(keyword: str, text: str, attributes: dict[str, str], namespace: str) -> DocumentationField | None:
    try:
        return build_field(keyword, text, attributes, namespace)
    except DirectiveError as e:
        logger.warning("Malformed %s entry %r: %s", keyword, text, e)
        return None


def parse_indented_list(lines: list[CommentLine], namespace: str = "") -> list[DocumentationField]:
    """Parse an indented-list comment into documentation fields."""
    lines = [line for line in lines if not line.is_blank]
    fields: list[DocumentationField] = []

    index = 0
    preamble = []
    while index < len(lines) and not lines[index].is_keyword:
        preamble.append(lines[index].content)
        index += 1
    if preamble:
        fields.append(Summary(text="\n".join(preamble)))

    while index < len(lines):
        line = lines[index]
        index += 1
        if line.key_value is None:
            logger.debug("Stray comment text %r ignored", line.content)
            continue
        key, value = line.key_value
        keyword = KEYWORDS.get(normalize_key(key))
        if keyword is None:
            logger.warning("Unknown documentation key %r skipped", key)
            continue

        if not value and key.lower().endswith("s"):
            while index < len(lines) and lines[index].indent > line.indent:
                item = lines[index]
                attributes, index = _collect_attributes(lines, index + 1, item.indent)
                field = _build(keyword, item.trimmed, attributes, namespace)
                if field is not None:
                    fields.append(field)
            continue

        attributes: dict[str, str] = {}
        if keyword not in TEXT_KEYWORDS:
            attributes, index = _collect_attributes(lines, index, line.indent)
        field = _build(keyword, value, attributes, namespace)
        if field is not None:
            fields.append(field)
    return fields
