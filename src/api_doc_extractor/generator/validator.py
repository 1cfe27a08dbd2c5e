"""Validates generated OpenAPI documents for structural consistency."""

import re

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
_TEMPLATE = re.compile(r"\{([^}/]+)}")


def _operations(document: dict):
    for path, item in (document.get("paths") or {}).items():
        for method, operation in item.items():
            if method in HTTP_METHODS and isinstance(operation, dict):
                yield path, method, operation


def _walk_refs(node, location: str):
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref" and isinstance(value, str):
                yield location, value
            else:
                yield from _walk_refs(value, f"{location}/{key}")
    elif isinstance(node, list):
        for index, value in enumerate(node):
            yield from _walk_refs(value, f"{location}/{index}")


def validate_refs(document: dict) -> dict[str, str]:
    """Check that every local ``$ref`` points at an existing component.

    Returns dict of {location: error_message} for dangling references.
    """
    errors = {}
    for location, ref in _walk_refs(document, "#"):
        if not ref.startswith("#/"):
            continue
        target = document
        for part in ref[2:].split("/"):
            if not isinstance(target, dict) or part not in target:
                errors[location] = f"Dangling reference {ref}"
                break
            target = target[part]
    return errors


def validate_path_parameters(document: dict) -> dict[str, str]:
    """Check that every ``{name}`` path segment is declared as a path parameter.

    Returns dict of {operation: error_message} for undeclared parameters.
    """
    errors = {}
    for path, method, operation in _operations(document):
        declared = {
            param.get("name")
            for param in operation.get("parameters", [])
            if param.get("in") == "path"
        }
        missing = [
            name.rstrip("?").removesuffix("...")
            for name in _TEMPLATE.findall(path)
            if name.rstrip("?").removesuffix("...") not in declared
        ]
        if missing:
            errors[f"{method.upper()} {path}"] = f"Undeclared path parameters: {', '.join(missing)}"
    return errors


def validate_responses(document: dict) -> dict[str, str]:
    """Check that every operation documents at least one response."""
    errors = {}
    for path, method, operation in _operations(document):
        if not operation.get("responses"):
            errors[f"{method.upper()} {path}"] = "No responses documented"
    return errors


def validate_document(document: dict) -> dict[str, str]:
    """Run all validations on a generated document.

    Returns dict of {location: error_message}. Dangling references are
    checked first; operation-level checks only run when they pass.
    """
    errors = {}
    errors.update(validate_refs(document))

    if not errors:
        for check in (validate_path_parameters, validate_responses):
            for location, message in check(document).items():
                if location in errors:
                    errors[location] += f"; {message}"
                else:
                    errors[location] = message
    return errors
