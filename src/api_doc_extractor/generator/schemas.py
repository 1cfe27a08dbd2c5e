"""JSON schemas for type references.

``SchemaAssembler.schema_for`` returns the schema to use where a type is
referenced and registers a named definition for every declared type it
meets. Declared types are always referenced through ``$ref``; a name that is
already registered, or still being expanded, is never expanded again, which
keeps self-referential types finite.
"""

import logging
from typing import assert_never

from api_doc_extractor.facts.base import TypeDecl, TypeExpr
from api_doc_extractor.parser.links import (
    ArrayLink,
    MapLink,
    OptionalLink,
    PrimitiveLink,
    ReferenceLink,
    ResolvedType,
    TypeReference,
    primitive_type,
)

logger = logging.getLogger(__name__)

REF_PREFIX = "#/components/schemas/"

# Types usually serialized by a custom serializer, by qualified name.
WELL_KNOWN_FORMATS = {
    "java.time.Instant": "date-time",
    "kotlin.time.Instant": "date-time",
    "kotlinx.datetime.Instant": "date-time",
    "java.time.LocalDateTime": "date-time",
    "java.time.OffsetDateTime": "date-time",
    "java.time.ZonedDateTime": "date-time",
    "kotlinx.datetime.LocalDateTime": "date-time",
    "java.time.LocalDate": "date",
    "kotlinx.datetime.LocalDate": "date",
    "java.time.LocalTime": "time",
    "java.time.OffsetTime": "time",
    "kotlinx.datetime.LocalTime": "time",
    "java.time.Duration": "duration",
    "kotlin.time.Duration": "duration",
    "java.util.UUID": "uuid",
    "kotlin.uuid.Uuid": "uuid",
}
BINARY_TYPES = frozenset({"kotlin.ByteArray", "java.io.File", "io.ktor.utils.io.ByteReadChannel"})
ARRAY_TYPES = frozenset(
    {
        "kotlin.Array",
        "kotlin.collections.List",
        "kotlin.collections.MutableList",
        "kotlin.collections.ArrayList",
        "kotlin.collections.Set",
        "kotlin.collections.MutableSet",
        "kotlin.collections.HashSet",
        "kotlin.collections.LinkedHashSet",
        "kotlin.collections.Collection",
        "kotlin.collections.MutableCollection",
        "kotlin.collections.Iterable",
        "kotlin.collections.MutableIterable",
    }
)
MAP_TYPES = frozenset(
    {
        "kotlin.collections.Map",
        "kotlin.collections.MutableMap",
        "kotlin.collections.HashMap",
        "kotlin.collections.LinkedHashMap",
    }
)
ANY_TYPES = frozenset({"kotlin.Any", "kotlin.Nothing", "kotlin.Unit"})


def _short(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _label(type_expr: TypeExpr, qualify: bool = True) -> str:
    """Name part of a type argument: ``List<com.acme.User>`` gives ``List_com_acme_User``."""
    name = type_expr.name if qualify else type_expr.short_name
    return "_".join([name.replace(".", "_")] + [_label(arg, qualify) for arg in type_expr.arguments])


def _in(name: str, table: frozenset) -> bool:
    # unqualified names only match the standard library types
    if "." in name:
        return name in table
    return any(_short(qualified) == name for qualified in table)


def well_known_schema(name: str) -> dict | None:
    """Schema of a custom-serialized standard type, e.g. an Instant or a UUID."""
    if name in WELL_KNOWN_FORMATS:
        return {"type": "string", "format": WELL_KNOWN_FORMATS[name]}
    if name in BINARY_TYPES:
        return {"type": "string", "format": "binary"}
    return None


class SchemaAssembler:
    def __init__(self, types: list[TypeDecl] | None = None):
        self.catalog: dict[str, TypeDecl] = {decl.name: decl for decl in types or []}
        self.definitions: dict[str, dict] = {}
        self._names: dict[str, str] = {}
        self._in_progress: set[str] = set()

    def schema_for(self, ref: TypeReference | None) -> dict | None:
        """The usage-site schema of ``ref``; None when there is no type at all."""
        if ref is None:
            return None
        return self._reference(ref)

    def _reference(self, ref: TypeReference) -> dict:
        match ref:
            case PrimitiveLink(json_type=json_type):
                return {"type": json_type.value}
            case ReferenceLink(name=name):
                return self._named(name)
            case ArrayLink(element=element):
                return {"type": "array", "items": self._reference(element)}
            case MapLink(value=value):
                return {"type": "object", "additionalProperties": self._reference(value)}
            case OptionalLink(inner=inner):
                return self._reference(inner)
            case ResolvedType(type=type_expr):
                return self.type_schema(type_expr)
            case _:
                assert_never(ref)

    def type_schema(self, type_expr: TypeExpr) -> dict:
        """Schema of a concrete type supplied by the call facts."""
        name = type_expr.name
        if name in self.catalog:
            return self._named(name, type_expr.arguments)
        json_type = primitive_type(name)
        if json_type is not None:
            return {"type": json_type.value}
        if _in(name, ARRAY_TYPES):
            items = self.type_schema(type_expr.arguments[0]) if type_expr.arguments else {}
            return {"type": "array", "items": items}
        if _in(name, MAP_TYPES):
            values = self.type_schema(type_expr.arguments[-1]) if type_expr.arguments else {}
            return {"type": "object", "additionalProperties": values}
        if _in(name, ANY_TYPES):
            return {}
        return self._named(name, type_expr.arguments)

    def _declaration(self, name: str) -> TypeDecl | None:
        if name in self.catalog:
            return self.catalog[name]
        candidates = [decl for decl in self.catalog.values() if decl.short_name == _short(name)]
        if len(candidates) == 1:
            logger.debug("Type %s resolved to %s by simple name", name, candidates[0].name)
            return candidates[0]
        return None

    def schema_name(self, qualified: str, short: str | None = None) -> str:
        """Component name for a type: its simple name unless another type took it."""
        if qualified in self._names:
            return self._names[qualified]
        name = short or _short(qualified)
        if name in self._names.values():
            name = qualified.replace(".", "_")
            logger.warning("Schema name %s is taken; using %s", short or _short(qualified), name)
        self._names[qualified] = name
        return name

    def _named(self, name: str, arguments: list[TypeExpr] | None = None) -> dict:
        json_type = primitive_type(name)
        if json_type is not None:
            return {"type": json_type.value}
        known = well_known_schema(name)
        if known is not None:
            return known

        decl = self._declaration(name)
        bindings: dict[str, TypeExpr] = {}
        qualified = decl.name if decl else name
        short = None
        if decl is not None and decl.type_parameters and arguments:
            bindings = dict(zip(decl.type_parameters, arguments))
            # one definition per instantiation, e.g. Page<User> becomes Page_User
            qualified = "_".join([decl.name] + [_label(arg) for arg in arguments])
            short = "_".join([decl.short_name] + [_label(arg, qualify=False) for arg in arguments])
        schema_name = self.schema_name(qualified, short)
        ref = {"$ref": REF_PREFIX + schema_name}
        if qualified in self._in_progress or schema_name in self.definitions:
            return ref

        if decl is None:
            logger.warning("Unknown type %s; using an empty object schema", name)
            self.definitions[schema_name] = {"type": "object"}
            return ref

        self._in_progress.add(qualified)
        try:
            self.definitions[schema_name] = self._object(decl, bindings)
        finally:
            self._in_progress.discard(qualified)
        return ref

    def _object(self, decl: TypeDecl, bindings: dict[str, TypeExpr]) -> dict:
        properties = {}
        required = []
        for prop in decl.properties:
            prop_type = prop.type.substitute(bindings) if bindings else prop.type
            if prop.contextual:
                schema = well_known_schema(prop_type.name) or {}
            else:
                schema = self.type_schema(prop_type)
            if prop.description:
                schema = {**schema, "description": prop.description}
            properties[prop.name] = schema
            if not prop_type.nullable:
                required.append(prop.name)

        schema: dict = {"type": "object"}
        if decl.description:
            schema["description"] = decl.description
        schema["properties"] = properties
        if required:
            schema["required"] = required
        return schema
