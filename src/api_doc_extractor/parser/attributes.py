"""Schema attribute vocabulary and value coercion.

Attributes are the indented ``key: value`` lines under a parameter, body or
response entry. They are stored as raw strings and only interpreted when
the document is assembled.
"""

import logging
import re

logger = logging.getLogger(__name__)

SCHEMA_ATTRIBUTES = frozenset(
    {
        "title",
        "description",
        "required",
        "nullable",
        "allOf",
        "oneOf",
        "not",
        "anyOf",
        "properties",
        "additionalProperties",
        "discriminator",
        "readOnly",
        "writeOnly",
        "xml",
        "externalDocs",
        "example",
        "examples",
        "deprecated",
        "maxProperties",
        "minProperties",
        "default",
        "format",
        "items",
        "maximum",
        "exclusiveMaximum",
        "minimum",
        "exclusiveMinimum",
        "maxLength",
        "minLength",
        "pattern",
        "maxItems",
        "minItems",
        "uniqueItems",
        "enum",
        "multipleOf",
        "id",
        "anchor",
        "recursiveAnchor",
    }
)

_CANONICAL = {key.lower(): key for key in SCHEMA_ATTRIBUTES}

INTEGER_KEYS = frozenset(
    {"maxLength", "minLength", "maxItems", "minItems", "maxProperties", "minProperties"}
)
NUMBER_KEYS = frozenset({"maximum", "minimum", "multipleOf"})
BOOLEAN_KEYS = frozenset(
    {
        "required",
        "nullable",
        "deprecated",
        "readOnly",
        "writeOnly",
        "uniqueItems",
        "exclusiveMaximum",
        "exclusiveMinimum",
        "recursiveAnchor",
    }
)
# Keys whose values are nested schemas; a one-line comment cannot express them.
STRUCTURAL_KEYS = frozenset(
    {"allOf", "oneOf", "not", "anyOf", "properties", "additionalProperties", "discriminator", "items", "xml"}
)
# Keys that describe the parameter or response object, not its schema.
OBJECT_KEYS = frozenset({"description", "required", "deprecated", "example", "examples"})

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0"}
_ATTRIBUTE_LINE = re.compile(r"^\s*([\w$-]+)\s*:\s*(.*)$")


def is_extension(key: str) -> bool:
    return key.startswith("x-")


def canonical_key(key: str) -> str | None:
    """Return the vocabulary spelling of ``key``, or None when it is unknown."""
    if is_extension(key):
        return key
    return _CANONICAL.get(key.lower())


def parse_attribute_line(line: str) -> tuple[str, str] | None:
    """Split an attribute line into key and value, or None when it is not one."""
    match = _ATTRIBUTE_LINE.match(line)
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def parse_attributes(lines: list[str]) -> dict[str, str]:
    """Collect validated attributes from ``key: value`` lines.

    Unknown keys are logged and dropped; later lines override earlier ones.
    """
    attributes: dict[str, str] = {}
    for line in lines:
        parsed = parse_attribute_line(line)
        if parsed is None:
            logger.warning("Ignoring malformed attribute line %r", line.strip())
            continue
        key, value = parsed
        canonical = canonical_key(key.lstrip("$"))
        if canonical is None:
            logger.warning("Unknown schema attribute %r dropped", key)
            continue
        attributes[canonical] = value
    return attributes


def parse_bool(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return None


def _parse_number(value: str) -> int | float | None:
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return None


def _parse_list(value: str) -> list[str]:
    inner = value.strip()
    if inner.startswith("[") and inner.endswith("]"):
        inner = inner[1:-1]
    return [item.strip().strip("\"'") for item in inner.split(",") if item.strip()]


def coerce_attribute(key: str, value: str):
    """Interpret a raw attribute value according to its key.

    Returns None when the value cannot be represented; the caller skips it.
    """
    if is_extension(key):
        return value
    if key in STRUCTURAL_KEYS:
        logger.warning("Attribute %r needs a nested schema and is not supported in comments", key)
        return None
    if key in INTEGER_KEYS:
        number = _parse_number(value)
        if not isinstance(number, int):
            logger.warning("Attribute %s expects an integer, got %r", key, value)
            return None
        return number
    if key in NUMBER_KEYS:
        number = _parse_number(value)
        if number is None:
            logger.warning("Attribute %s expects a number, got %r", key, value)
        return number
    if key in BOOLEAN_KEYS:
        flag = parse_bool(value)
        if flag is None:
            logger.warning("Attribute %s expects a boolean, got %r", key, value)
        return flag
    if key == "enum":
        return _parse_list(value)
    return value


def split_attributes(attributes: dict[str, str]) -> tuple[dict, dict, dict]:
    """Partition coerced attributes into schema keywords, object keys and extensions."""
    schema: dict = {}
    owner: dict = {}
    extensions: dict = {}
    for key, raw in attributes.items():
        value = coerce_attribute(key, raw)
        if value is None:
            continue
        if is_extension(key):
            extensions[key] = value
        elif key in OBJECT_KEYS:
            owner[key] = value
        else:
            schema[key] = value
    return schema, owner, extensions
