"""Assembling the OpenAPI document from resolved routes."""

import copy
import logging
from typing import assert_never

from api_doc_extractor.config import SpecInfo
from api_doc_extractor.facts.base import SecuritySchemeDecl
from api_doc_extractor.merge import merge_fields
from api_doc_extractor.parser.attributes import split_attributes
from api_doc_extractor.parser.base import (
    ANY_SCHEME,
    Body,
    Deprecated,
    Description,
    DocumentationField,
    ExternalDocs,
    Ignore,
    Method,
    OperationId,
    Parameter,
    ParamLocation,
    PathSegment,
    Response,
    ResponseHeader,
    Security,
    Summary,
    Tag,
)
from api_doc_extractor.parser.links import is_optional
from api_doc_extractor.routing.collector import ResolvedRoute

from .schemas import SchemaAssembler

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"
STRING_SCHEMA = {"type": "string"}


def security_scheme_object(decl: SecuritySchemeDecl) -> dict:
    scheme: dict = {"type": decl.type}
    if decl.description:
        scheme["description"] = decl.description
    if decl.type == "http":
        scheme["scheme"] = decl.scheme or "bearer"
        if decl.bearer_format:
            scheme["bearerFormat"] = decl.bearer_format
    elif decl.type == "apiKey":
        scheme["name"] = decl.parameter_name or decl.name
        scheme["in"] = decl.location or "header"
    elif decl.type == "oauth2":
        scheme["flows"] = decl.flows or {}
    elif decl.type == "openIdConnect":
        scheme["openIdConnectUrl"] = decl.open_id_connect_url or ""
    return scheme


def _path_template_names(path: str) -> set[str]:
    names = set()
    for segment in path.split("/"):
        if segment.startswith("{") and segment.endswith("}"):
            names.add(segment[1:-1].rstrip("?").removesuffix("..."))
    return names


class SpecificationBuilder:
    """Builds OpenAPI operations; schemas are registered on the assembler."""

    def __init__(
        self,
        assembler: SchemaAssembler,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
        security_schemes: dict[str, SecuritySchemeDecl] | None = None,
    ):
        self.assembler = assembler
        self.default_content_type = default_content_type
        self.security_schemes = security_schemes or {}

    def _schema(self, field, attributes: dict) -> tuple[dict | None, dict, dict]:
        schema = self.assembler.schema_for(field.type_ref)
        schema_attributes, owner, extensions = split_attributes(attributes)
        if schema_attributes:
            schema = {**(schema or STRING_SCHEMA), **schema_attributes}
        return schema, owner, extensions

    def parameter(self, field: Parameter, path: str) -> dict:
        location = field.location
        if location is None:
            location = ParamLocation.PATH if field.name in _path_template_names(path) else ParamLocation.QUERY
            logger.debug("Parameter %r of %s placed in %s", field.name, path, location.value)
        schema, owner, extensions = self._schema(field, field.attributes)

        param: dict = {"name": field.name, "in": location.value}
        description = field.description or owner.get("description")
        if description:
            param["description"] = description
        if location == ParamLocation.PATH:
            param["required"] = True
        else:
            param["required"] = bool(owner.get("required", False))
        if owner.get("deprecated"):
            param["deprecated"] = True
        if "example" in owner:
            param["example"] = owner["example"]
        param["schema"] = schema or dict(STRING_SCHEMA)
        param.update(extensions)
        return param

    def request_body(self, field: Body) -> dict:
        schema, owner, extensions = self._schema(field, field.attributes)
        body: dict = {}
        description = field.description or owner.get("description")
        if description:
            body["description"] = description
        media_type = field.content_type or self.default_content_type
        body["content"] = {media_type: {"schema": schema} if schema is not None else {}}
        if "required" in owner:
            body["required"] = owner["required"]
        elif field.type_ref is not None:
            body["required"] = not is_optional(field.type_ref)
        body.update(extensions)
        return body

    def response(self, field: Response, headers: dict) -> dict:
        schema, owner, extensions = self._schema(field, field.attributes)
        response: dict = {"description": field.description or owner.get("description") or ""}
        if headers:
            response["headers"] = copy.deepcopy(headers)
        if field.content_type or schema is not None:
            media_type = field.content_type or self.default_content_type
            response["content"] = {media_type: {"schema": schema} if schema is not None else {}}
        response.update(extensions)
        return response

    def header(self, field: ResponseHeader) -> dict:
        schema, owner, extensions = self._schema(field, field.attributes)
        header: dict = {}
        description = field.description or owner.get("description")
        if description:
            header["description"] = description
        header["schema"] = schema or dict(STRING_SCHEMA)
        header.update(extensions)
        return header

    def security(self, field: Security) -> list[dict]:
        scopes = field.scopes or []
        if field.scheme is None:
            return [{}]
        if field.scheme == ANY_SCHEME:
            if not self.security_schemes:
                logger.warning("Security requirement on any scheme, but no schemes are declared")
            return [{name: list(scopes)} for name in self.security_schemes]
        return [{field.scheme: list(scopes)}]

    def operation(self, path: str, fields: list[DocumentationField]) -> dict:
        summary = description = operation_id = external_docs = request_body = None
        deprecated = False
        tags: list[str] = []
        parameters: dict[tuple[str, str], dict] = {}
        responses: list[Response] = []
        headers: dict[str, dict] = {}
        security: list[dict] = []

        for field in fields:
            match field:
                case Summary(text=text):
                    summary = summary or text
                case Description(text=text):
                    description = description or text
                case Tag(name=name):
                    if name not in tags:
                        tags.append(name)
                case Deprecated():
                    deprecated = True
                case OperationId(value=value):
                    operation_id = operation_id or value
                case ExternalDocs(url=url, description=docs_description):
                    if external_docs is None:
                        external_docs = {"url": url}
                        if docs_description:
                            external_docs["description"] = docs_description
                case Parameter():
                    param = self.parameter(field, path)
                    parameters.setdefault((param["name"], param["in"]), param)
                case Body():
                    if request_body is None:
                        request_body = self.request_body(field)
                case Response():
                    responses.append(field)
                case ResponseHeader(name=name):
                    headers.setdefault(name, self.header(field))
                case Security():
                    for requirement in self.security(field):
                        if requirement not in security:
                            security.append(requirement)
                case Ignore() | PathSegment() | Method():
                    pass
                case _:
                    assert_never(field)

        if headers and not responses:
            responses.append(Response(status_code="200"))

        operation: dict = {}
        if tags:
            operation["tags"] = tags
        if summary:
            operation["summary"] = summary
        if description:
            operation["description"] = description
        if external_docs:
            operation["externalDocs"] = external_docs
        if operation_id:
            operation["operationId"] = operation_id
        if parameters:
            operation["parameters"] = list(parameters.values())
        if request_body:
            operation["requestBody"] = request_body
        if responses:
            operation["responses"] = {}
            for response in responses:
                code = response.effective_code
                if code not in operation["responses"]:
                    operation["responses"][code] = self.response(response, headers)
        if deprecated:
            operation["deprecated"] = True
        if security:
            operation["security"] = security
        return operation

    def paths(self, routes: list[ResolvedRoute]) -> dict:
        grouped: dict[str, dict[str, list[DocumentationField]]] = {}
        for route in routes:
            methods = grouped.setdefault(route.path, {})
            if route.method in methods:
                logger.info("%s %s reached more than once; merging", route.method.upper(), route.path)
                methods[route.method] = merge_fields(methods[route.method], route.fields)
            else:
                methods[route.method] = list(route.fields)
        return {
            path: {method: self.operation(path, fields) for method, fields in methods.items()}
            for path, methods in grouped.items()
        }


def build_specification(
    routes: list[ResolvedRoute],
    assembler: SchemaAssembler,
    info: SpecInfo | None = None,
    default_content_type: str = DEFAULT_CONTENT_TYPE,
    security_schemes: dict[str, SecuritySchemeDecl] | None = None,
    openapi_version: str = "3.1.1",
) -> dict:
    """Build the OpenAPI document for ``routes``."""
    builder = SpecificationBuilder(assembler, default_content_type, security_schemes)
    paths = builder.paths(routes)

    components: dict = {"schemas": dict(assembler.definitions)}
    if builder.security_schemes:
        components["securitySchemes"] = {
            name: security_scheme_object(decl) for name, decl in builder.security_schemes.items()
        }
    return {
        "openapi": openapi_version,
        "info": (info or SpecInfo()).to_openapi(),
        "paths": paths,
        "components": components,
    }
