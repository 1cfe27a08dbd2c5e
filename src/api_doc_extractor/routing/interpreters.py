"""Turning call facts into route graph nodes.

Each recognised call becomes a ``RouteNode``, ``CallFeatureNode`` or
``FunctionNode``. Calls that configure the application rather than a route
(content negotiation, authentication providers) update the interpreter's
application settings instead.
"""

import logging
import re

from api_doc_extractor.facts.base import Argument, CallSite, SecuritySchemeDecl, SourceFile
from api_doc_extractor.merge import merge_fields
from api_doc_extractor.parser.base import (
    ANY_SCHEME,
    Body,
    DocumentationField,
    Method,
    Parameter,
    ParamLocation,
    PathSegment,
    Response,
    ResponseHeader,
    Security,
    Summary,
)
from api_doc_extractor.parser.detect import parse_preceding_comment
from api_doc_extractor.parser.links import ResolvedType

from . import constants
from .nodes import CallFeatureNode, FunctionNode, Node, RouteNode
from .stack import RouteStack

logger = logging.getLogger(__name__)

_CAMEL = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def status_code(argument: Argument) -> str | None:
    """Read a status code from ``HttpStatusCode.NotFound``, ``HttpStatusCode(418, ...)`` or 404."""
    if isinstance(argument.value, int) and not isinstance(argument.value, bool):
        return str(argument.value)
    text = argument.text or (argument.value if isinstance(argument.value, str) else None)
    if not text:
        return None
    name = text.rsplit(".", 1)[-1]
    if name in constants.HTTP_STATUS_CODES:
        return constants.HTTP_STATUS_CODES[name]
    match = re.search(r"\b(\d{3})\b", text)
    return match.group(1) if match else None


def content_type(argument: Argument) -> str | None:
    """Read a media type from ``ContentType.Application.Json`` or a literal."""
    if isinstance(argument.value, str) and "/" in argument.value:
        return argument.value
    text = argument.text or ""
    if not text.startswith("ContentType."):
        return None
    parts = text.removeprefix("ContentType.").split(".")
    if len(parts) != 2:
        return None
    return "/".join(_CAMEL.sub("-", part).lower() for part in parts)


def _type_name(argument: Argument) -> str | None:
    return argument.type.short_name if argument.type else None


class CallInterpreter:
    """Interprets call facts of one code base.

    ``sources`` maps a file path to its source file, text included.
    """

    def __init__(self, sources: dict[str, SourceFile]):
        self.sources = sources
        self.security_schemes: dict[str, SecuritySchemeDecl] = {}
        self.content_type: str | None = None

    def interpret(self, call: CallSite) -> Node | None:
        """Build the node for ``call``, or None when it is not a route node."""
        if self._is_content_negotiation(call):
            self._content_negotiation(call)
            return None
        if call.namespace.startswith(constants.AUTH_NAMESPACE) and call.name in constants.AUTH_PROVIDERS:
            self._auth_provider(call)
            return None
        if call.namespace == constants.ROUTING_NAMESPACE and (
            call.name in constants.HTTP_METHODS or call.name in constants.ROUTE_CONTAINERS
        ):
            return self._endpoint(call)
        if call.namespace.startswith(constants.AUTH_NAMESPACE) and call.name == "authenticate":
            return self._authenticate(call)
        if call.namespace == constants.REQUEST_NAMESPACE and call.name in constants.RECEIVE_FUNCTIONS:
            return self._receive(call)
        if call.namespace in constants.RESPONSE_NAMESPACES and call.name.startswith("respond"):
            return self._respond(call)
        if call.name in constants.PARAMETER_FUNCTIONS and self._parameter_receiver(call) is not None:
            return self._parameter(call)
        if self._is_response_header(call):
            return self._response_header(call)
        if call.declaration is not None:
            return self._function(call)
        logger.debug("Call %s at %s:%d not recognised", call.name, call.file, call.start)
        return None

    def comment(self, file: str, offset: int) -> list[DocumentationField]:
        source = self.sources.get(file)
        if source is None or source.text is None:
            logger.warning("No source text for %s; comment at %d skipped", file, offset)
            return []
        return parse_preceding_comment(source.text, offset, source.namespace)

    def _endpoint(self, call: CallSite) -> RouteNode:
        docs = self.comment(call.file, call.start)
        path_argument = call.argument("path", 0)
        if path_argument is not None and path_argument.type is not None and path_argument.type.short_name != "String":
            path_argument = None

        method = call.name if call.name in constants.HTTP_METHODS else None
        if call.name in ("route", "method"):
            method_argument = call.argument("method", 1 if call.name == "route" else 0)
            if method_argument is not None and method_argument.text:
                candidate = method_argument.text.rsplit(".", 1)[-1].lower()
                method = candidate if candidate in constants.HTTP_METHODS else None
            if call.name == "method":
                path_argument = None

        def resolve(stack: RouteStack) -> list[DocumentationField]:
            fields = list(docs)
            if path_argument is not None:
                segment = stack.resolve(path_argument)
                if segment is not None:
                    fields.append(PathSegment(segment=segment))
            if method is not None:
                fields.append(Method(name=method))
            return fields

        return RouteNode(
            call=call,
            resolver=resolve,
            path_argument=path_argument,
            method=method,
            documented=bool(docs),
        )

    def _authenticate(self, call: CallSite) -> RouteNode:
        docs = self.comment(call.file, call.start)
        names = [arg for arg in call.arguments if arg.name in (None, "configurations")]
        optional = call.argument("optional", len(call.arguments))

        def resolve(stack: RouteStack) -> list[DocumentationField]:
            fields = list(docs)
            schemes = [stack.resolve(arg) for arg in names]
            schemes = [scheme for scheme in schemes if scheme]
            for scheme in schemes or [ANY_SCHEME]:
                fields.append(Security(scheme=scheme))
            if stack.resolve(optional) == "true":
                fields.append(Security(scheme=None))
            return fields

        return RouteNode(call=call, resolver=resolve, documented=bool(docs))

    def _receive(self, call: CallSite) -> CallFeatureNode:
        type_expr = call.type_arguments[0] if call.type_arguments else call.returns

        def resolve(stack: RouteStack) -> list[DocumentationField]:
            body_type = stack.resolve_type(type_expr)
            return [Body(type_ref=ResolvedType(type=body_type))] if body_type else [Body()]

        return CallFeatureNode(call=call, resolver=resolve)

    def _respond(self, call: CallSite) -> CallFeatureNode:
        code = "302" if call.name == "respondRedirect" else None
        media_type = constants.RESPOND_CONTENT_TYPES.get(call.name)
        body_type = call.type_arguments[0] if call.type_arguments else None
        for arg in call.arguments:
            if arg.name == "status" or _type_name(arg) == "HttpStatusCode":
                code = status_code(arg) or code
            elif arg.name == "contentType" or _type_name(arg) == "ContentType":
                media_type = content_type(arg) or media_type
            elif (
                body_type is None
                and call.name != "respondRedirect"
                and arg.type is not None
                and arg.type.short_name not in constants.RESPOND_NON_BODY_TYPES
            ):
                body_type = arg.type

        def resolve(stack: RouteStack) -> list[DocumentationField]:
            resolved = stack.resolve_type(body_type)
            return [
                Response(
                    status_code=code or "200",
                    content_type=media_type,
                    type_ref=ResolvedType(type=resolved) if resolved else None,
                )
            ]

        return CallFeatureNode(call=call, resolver=resolve)

    def _parameter_receiver(self, call: CallSite) -> str | None:
        receiver = (call.receiver or "").rstrip("?!")
        for suffix in constants.PARAMETER_RECEIVERS:
            if receiver == suffix or receiver.endswith("." + suffix):
                if suffix == "headers" and receiver.endswith("response.headers"):
                    return None
                return suffix
        return None

    def _parameter(self, call: CallSite) -> CallFeatureNode:
        location = constants.PARAMETER_RECEIVERS[self._parameter_receiver(call)]
        key = call.argument("name", 0)
        type_expr = call.type_arguments[0] if call.type_arguments else None

        def resolve(stack: RouteStack) -> list[DocumentationField]:
            name = stack.resolve(key)
            if not name:
                return []
            param_type = stack.resolve_type(type_expr)
            return [
                Parameter(
                    location=ParamLocation(location) if location else self._infer_location(name, stack),
                    name=name,
                    type_ref=ResolvedType(type=param_type) if param_type else None,
                )
            ]

        return CallFeatureNode(call=call, resolver=resolve)

    def _infer_location(self, name: str, stack: RouteStack) -> ParamLocation:
        path = stack.path()
        templates = ("{" + name + "}", "{" + name + "?}", "{" + name + "...}")
        if any(template in path for template in templates):
            logger.debug("Parameter %r taken as a path parameter of %s", name, path)
            return ParamLocation.PATH
        logger.debug("Parameter %r not in %s; taken as a query parameter", name, path)
        return ParamLocation.QUERY

    def _is_response_header(self, call: CallSite) -> bool:
        receiver = constants.RESPONSE_HEADER_FUNCTIONS.get(call.name)
        return receiver is not None and (call.receiver or "").endswith(receiver)

    def _response_header(self, call: CallSite) -> CallFeatureNode:
        key = call.argument("name", 0)

        def resolve(stack: RouteStack) -> list[DocumentationField]:
            name = stack.resolve(key)
            return [ResponseHeader(name=name)] if name else []

        return CallFeatureNode(call=call, resolver=resolve)

    def _function(self, call: CallSite) -> FunctionNode:
        declaration = call.declaration
        invocation_docs = self.comment(call.file, call.start)
        declaration_docs = self.comment(declaration.file, declaration.start)
        docs = merge_fields(invocation_docs, declaration_docs)
        if not any(isinstance(f, Summary) for f in invocation_docs):
            docs = [f for f in declaration_docs if isinstance(f, Summary)] + docs
        return FunctionNode(
            call=call,
            declaration=declaration,
            resolver=lambda stack: list(docs),
            bindings=call.bindings(),
            type_bindings=call.type_bindings(),
        )

    def _is_content_negotiation(self, call: CallSite) -> bool:
        if call.name != "install":
            return False
        plugin = call.argument("plugin", 0)
        if plugin is None:
            return False
        return constants.CONTENT_NEGOTIATION in (plugin.text or str(plugin.value or ""))

    def _content_negotiation(self, call: CallSite) -> None:
        source = self.sources.get(call.file)
        body = source.text[call.start:call.end].lower() if source and source.text else ""
        if any(name in body for name in constants.JSON_SERIALIZERS):
            detected = "application/json"
        elif any(name in body for name in constants.XML_SERIALIZERS):
            detected = "application/xml"
        else:
            detected = "application/octet-stream"
        if self.content_type is None:
            logger.info("Content negotiation detected: default content type %s", detected)
            self.content_type = detected

    def _auth_provider(self, call: CallSite) -> None:
        scheme_type, scheme, bearer_format = constants.AUTH_PROVIDERS[call.name]
        name_arg = call.argument("name", 0)
        name = RouteStack().resolve(name_arg) or call.name
        self.security_schemes[name] = SecuritySchemeDecl(
            name=name,
            type=scheme_type,
            scheme=scheme,
            bearer_format=bearer_format,
        )
        logger.debug("Security scheme %r (%s) declared at %s:%d", name, call.name, call.file, call.start)
