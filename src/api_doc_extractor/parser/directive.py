"""Directive dialect: ``@keyword`` lines.

    Get a single user.

    @path id [Int] The user ID
      minimum: 1
    @response 200 [User] The user
    @response 404 Not found
"""

import logging

from .attributes import parse_attribute_line, parse_attributes
from .base import DocumentationField, Summary
from .comments import CommentLine
from .grammar import TEXT_KEYWORDS, DirectiveError, build_field

logger = logging.getLogger(__name__)

DIRECTIVE_KEYWORDS = {
    "body": "body",
    "cookie": "cookie",
    "deprecated": "deprecated",
    "description": "description",
    "externaldocs": "externaldoc",
    "header": "header",
    "ignore": "ignore",
    "operationid": "operationid",
    "path": "path",
    "query": "query",
    "response": "response",
    "responseheader": "response header",
    "security": "security",
    "summary": "summary",
    "tag": "tag",
}


def _parse_directive(chunk: list[CommentLine], namespace: str) -> DocumentationField | None:
    parts = chunk[0].content[1:].split(None, 1)
    head = parts[0] if parts else ""
    text = parts[1] if len(parts) > 1 else ""
    keyword = DIRECTIVE_KEYWORDS.get(head.lower())
    if keyword is None:
        logger.warning("Unknown directive @%s skipped", head)
        return None

    attribute_lines: list[str] = []
    body = [text]
    for line in chunk[1:]:
        if keyword not in TEXT_KEYWORDS and parse_attribute_line(line.content):
            attribute_lines.append(line.content)
        elif not attribute_lines:
            body.append(line.content)
        else:
            logger.warning("Text after attributes of @%s ignored: %r", head, line.content)

    try:
        return build_field(keyword, "\n".join(body), parse_attributes(attribute_lines), namespace)
    except DirectiveError as e:
        logger.warning("Malformed directive %r: %s", chunk[0].content, e)
        return None


def parse_directives(lines: list[CommentLine], namespace: str = "") -> list[DocumentationField]:
    """Parse a directive-dialect comment into documentation fields.

    Prose before the first directive becomes the summary. Each directive owns
    the lines up to the next one; ``key: value`` lines among them are its
    attributes.
    """
    fields: list[DocumentationField] = []
    preamble: list[str] = []
    chunks: list[list[CommentLine]] = []
    for line in lines:
        if line.is_blank:
            continue
        if line.is_directive:
            chunks.append([line])
        elif chunks:
            chunks[-1].append(line)
        else:
            preamble.append(line.content)

    if preamble:
        fields.append(Summary(text="\n".join(preamble)))
    for chunk in chunks:
        field = _parse_directive(chunk, namespace)
        if field is not None:
            fields.append(field)
    return fields
