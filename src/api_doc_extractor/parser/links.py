"""Type references and the schema-link token grammar.

A schema link is written ``(:)?[TypeName](?|+)?`` inside doc comments:
``[User]`` references a declared type, ``[Int]`` a primitive, ``[User]+`` an
array, ``[User]?`` an optional value and ``:[User]`` a string-keyed map.
"""

import logging
import re
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from api_doc_extractor.facts.base import TypeExpr

logger = logging.getLogger(__name__)

SCHEMA_LINK = re.compile(r"^(:?)\[(.*)]([?+]?)$")


class JsonType(str, Enum):
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


PRIMITIVE_NAMES: dict[str, JsonType] = {
    "Int": JsonType.INTEGER,
    "UInt": JsonType.INTEGER,
    "Short": JsonType.INTEGER,
    "UShort": JsonType.INTEGER,
    "Byte": JsonType.INTEGER,
    "UByte": JsonType.INTEGER,
    "Long": JsonType.INTEGER,
    "ULong": JsonType.INTEGER,
    "Float": JsonType.NUMBER,
    "Double": JsonType.NUMBER,
    "Number": JsonType.NUMBER,
    "Boolean": JsonType.BOOLEAN,
    "String": JsonType.STRING,
    "Char": JsonType.STRING,
    "integer": JsonType.INTEGER,
    "number": JsonType.NUMBER,
    "boolean": JsonType.BOOLEAN,
    "string": JsonType.STRING,
}


def primitive_type(name: str) -> JsonType | None:
    """Look up a primitive by simple name, or by its ``kotlin.`` qualified name."""
    if name.startswith("kotlin.") and name.count(".") == 1:
        name = name.removeprefix("kotlin.")
    return PRIMITIVE_NAMES.get(name)


class _Link(BaseModel):
    model_config = ConfigDict(frozen=True)


class PrimitiveLink(_Link):
    kind: Literal["primitive"] = "primitive"
    name: str
    json_type: JsonType


class ReferenceLink(_Link):
    kind: Literal["reference"] = "reference"
    name: str  # qualified

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


class ArrayLink(_Link):
    kind: Literal["array"] = "array"
    element: "Link"


class MapLink(_Link):
    kind: Literal["map"] = "map"
    value: "Link"


class OptionalLink(_Link):
    kind: Literal["optional"] = "optional"
    inner: "Link"


class ResolvedType(_Link):
    """A concrete type taken from the call facts rather than from a comment."""

    kind: Literal["resolved"] = "resolved"
    type: TypeExpr


Link = Annotated[
    Union[PrimitiveLink, ReferenceLink, ArrayLink, MapLink, OptionalLink],
    Field(discriminator="kind"),
]

TypeReference = Annotated[
    Union[PrimitiveLink, ReferenceLink, ArrayLink, MapLink, OptionalLink, ResolvedType],
    Field(discriminator="kind"),
]

ArrayLink.model_rebuild()
MapLink.model_rebuild()
OptionalLink.model_rebuild()


def schema_link(prefix: str, name: str, postfix: str, namespace: str = "") -> Link:
    """Build a link from the three parts of a schema-link token.

    The postfix wraps the base link first; the map prefix wraps last, so
    ``:[User]+`` is a map of arrays of users.
    """
    json_type = primitive_type(name)
    if json_type is not None:
        link: Link = PrimitiveLink(name=name, json_type=json_type)
    elif "." in name or not namespace:
        link = ReferenceLink(name=name)
    else:
        link = ReferenceLink(name=f"{namespace}.{name}")

    if postfix == "?":
        link = OptionalLink(inner=link)
    elif postfix == "+":
        link = ArrayLink(element=link)

    if prefix == ":":
        link = MapLink(value=link)
    return link


def parse_schema_link(token: str, namespace: str = "") -> Link | None:
    """Parse a ``[TypeName]`` token, or return None when ``token`` is not one."""
    match = SCHEMA_LINK.match(token)
    if not match:
        return None
    prefix, name, postfix = match.groups()
    name = name.strip()
    if not name:
        logger.warning("Unresolved schema link %r: empty type name", token)
        return None
    return schema_link(prefix, name, postfix, namespace)


def is_optional(ref: "TypeReference | None") -> bool:
    match ref:
        case OptionalLink():
            return True
        case ResolvedType(type=type_expr):
            return type_expr.nullable
        case _:
            return False
