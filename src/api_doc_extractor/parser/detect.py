"""Comment dialect detection and parsing entry points."""

import logging
from enum import Enum

from .base import DocumentationField, Summary
from .comments import CommentLine, find_preceding_comment
from .directive import parse_directives
from .markdown import parse_indented_list

logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    DIRECTIVE = "directive"
    INDENTED_LIST = "indented-list"
    PROSE = "prose"


def detect_dialect(lines: list[CommentLine]) -> Dialect:
    """Detect the dialect from the first structural line.

    Prose lines are skipped; the first ``@`` line or known ``Key:`` line
    decides.
    """
    for line in lines:
        if line.is_directive:
            return Dialect.DIRECTIVE
        if line.is_keyword:
            return Dialect.INDENTED_LIST
    return Dialect.PROSE


def parse_comment(lines: list[CommentLine], namespace: str = "") -> list[DocumentationField]:
    """Parse classified comment lines into documentation fields."""
    dialect = detect_dialect(lines)
    logger.debug("Parsing %d comment lines as %s", len(lines), dialect.value)
    if dialect == Dialect.DIRECTIVE:
        return parse_directives(lines, namespace)
    elif dialect == Dialect.INDENTED_LIST:
        return parse_indented_list(lines, namespace)
    else:
        text = "\n".join(line.content for line in lines if not line.is_blank)
        return [Summary(text=text)] if text else []


def parse_preceding_comment(text: str, offset: int, namespace: str = "") -> list[DocumentationField]:
    """Parse the doc comment directly above ``offset`` in ``text``."""
    return parse_comment(find_preceding_comment(text, offset), namespace)
