"""Documentation fields: the unit of information about one operation.

Comment parsers and call interpreters both produce these fields; the merge
engine combines them along routing paths and the document assembler
turns the merged set into an OpenAPI operation.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .links import TypeReference


class ParamLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"


class _Field(BaseModel):
    model_config = ConfigDict(frozen=True)


class Summary(_Field):
    kind: Literal["summary"] = "summary"
    text: str


class Description(_Field):
    kind: Literal["description"] = "description"
    text: str


class Tag(_Field):
    kind: Literal["tag"] = "tag"
    name: str


class Deprecated(_Field):
    kind: Literal["deprecated"] = "deprecated"
    reason: str | None = None


class OperationId(_Field):
    kind: Literal["operation_id"] = "operation_id"
    value: str


class ExternalDocs(_Field):
    kind: Literal["external_docs"] = "external_docs"
    url: str
    description: str | None = None


class Parameter(_Field):
    """A request parameter. ``location`` None means not yet known."""

    kind: Literal["parameter"] = "parameter"
    location: ParamLocation | None = None
    name: str
    type_ref: TypeReference | None = None
    description: str | None = None
    attributes: dict[str, str] = {}


class Body(_Field):
    kind: Literal["body"] = "body"
    content_type: str | None = None
    type_ref: TypeReference | None = None
    description: str | None = None
    attributes: dict[str, str] = {}


class Response(_Field):
    kind: Literal["response"] = "response"
    status_code: str | None = None
    content_type: str | None = None
    type_ref: TypeReference | None = None
    description: str | None = None
    attributes: dict[str, str] = {}

    @property
    def effective_code(self) -> str:
        return self.status_code or "200"


class ResponseHeader(_Field):
    kind: Literal["response_header"] = "response_header"
    name: str
    type_ref: TypeReference | None = None
    description: str | None = None
    attributes: dict[str, str] = {}


class Security(_Field):
    """A security requirement.

    ``scheme`` None marks authentication as optional; ``"*"`` accepts any
    declared scheme.
    """

    kind: Literal["security"] = "security"
    scheme: str | None = None
    scopes: list[str] | None = None


class Ignore(_Field):
    kind: Literal["ignore"] = "ignore"


class PathSegment(_Field):
    kind: Literal["path"] = "path"
    segment: str


class Method(_Field):
    kind: Literal["method"] = "method"
    name: str  # lower case


DocumentationField = Annotated[
    Union[
        Summary,
        Description,
        Tag,
        Deprecated,
        OperationId,
        ExternalDocs,
        Parameter,
        Body,
        Response,
        ResponseHeader,
        Security,
        Ignore,
        PathSegment,
        Method,
    ],
    Field(discriminator="kind"),
]

ANY_SCHEME = "*"
