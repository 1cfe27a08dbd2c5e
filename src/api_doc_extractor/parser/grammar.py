"""Token grammar shared by both comment dialects.

Whichever way a keyword is spelled, ``@response`` or ``- Response:``, its
text is read the same way: optional status code, optional content type,
optional schema link, then free description.
"""

import re

from .base import (
    Body,
    Deprecated,
    Description,
    DocumentationField,
    ExternalDocs,
    Ignore,
    OperationId,
    Parameter,
    ParamLocation,
    Response,
    ResponseHeader,
    Security,
    Summary,
    Tag,
)
from .links import SCHEMA_LINK, Link, parse_schema_link

STATUS_CODE = re.compile(r"^\d+$")
CONTENT_TYPE = re.compile(r"^\w+/\S+$")

# Keywords whose whole text is prose and which take no attribute block.
TEXT_KEYWORDS = frozenset({"summary", "description", "deprecated"})


class DirectiveError(ValueError):
    """A keyword is missing a required token."""


class TokenReader:
    """Reads whitespace-separated words from the text after a keyword."""

    def __init__(self, text: str):
        self.words = text.split()
        self.pos = 0

    def peek(self) -> str | None:
        if self.pos < len(self.words):
            return self.words[self.pos]
        return None

    def next(self, what: str) -> str:
        word = self.peek()
        if word is None:
            raise DirectiveError(f"missing {what}")
        self.pos += 1
        return word

    def optional(self, pattern: re.Pattern) -> str | None:
        word = self.peek()
        if word is not None and pattern.match(word):
            self.pos += 1
            return word
        return None

    def schema(self, namespace: str) -> Link | None:
        token = self.optional(SCHEMA_LINK)
        if token is None:
            return None
        return parse_schema_link(token, namespace)

    def rest(self) -> str | None:
        remaining = " ".join(self.words[self.pos:])
        self.pos = len(self.words)
        return remaining or None


def build_field(
    keyword: str, text: str, attributes: dict[str, str], namespace: str = ""
) -> DocumentationField | None:
    """Turn a grammar keyword and its text into a documentation field.

    Returns None for an unknown keyword; raises DirectiveError when a
    required token is missing.
    """
    reader = TokenReader(text)
    match keyword:
        case "path" | "query" | "header" | "cookie":
            name = reader.next("parameter name")
            return Parameter(
                location=ParamLocation(keyword),
                name=name,
                type_ref=reader.schema(namespace),
                description=reader.rest(),
                attributes=attributes,
            )
        case "body":
            content_type = reader.optional(CONTENT_TYPE)
            return Body(
                content_type=content_type,
                type_ref=reader.schema(namespace),
                description=reader.rest(),
                attributes=attributes,
            )
        case "response":
            code = reader.optional(STATUS_CODE)
            content_type = reader.optional(CONTENT_TYPE)
            return Response(
                status_code=code,
                content_type=content_type,
                type_ref=reader.schema(namespace),
                description=reader.rest(),
                attributes=attributes,
            )
        case "response header":
            name = reader.next("header name")
            return ResponseHeader(
                name=name,
                type_ref=reader.schema(namespace),
                description=reader.rest(),
                attributes=attributes,
            )
        case "security":
            scheme = reader.next("security scheme")
            scopes = [s.strip() for s in (reader.rest() or "").split(",") if s.strip()]
            return Security(scheme=scheme, scopes=scopes or None)
        case "tag":
            return Tag(name=reader.next("tag name"))
        case "operationid":
            return OperationId(value=reader.next("operation id"))
        case "externaldoc":
            url = reader.next("url")
            return ExternalDocs(url=url, description=reader.rest())
        case "summary":
            return Summary(text=_prose(text, "summary"))
        case "description":
            return Description(text=_prose(text, "description"))
        case "deprecated":
            return Deprecated(reason=text.strip() or None)
        case "ignore":
            return Ignore()
    return None


def _prose(text: str, what: str) -> str:
    stripped = text.strip()
    if not stripped:
        raise DirectiveError(f"missing {what} text")
    return stripped
