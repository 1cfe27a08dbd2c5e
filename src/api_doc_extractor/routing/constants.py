"""Names of the routing DSL functions the interpreters recognise."""

ROUTING_NAMESPACE = "io.ktor.server.routing"
AUTH_NAMESPACE = "io.ktor.server.auth"
REQUEST_NAMESPACE = "io.ktor.server.request"
RESPONSE_NAMESPACES = frozenset(
    {"io.ktor.server.response", "io.ktor.server.html", "io.ktor.server.http.content"}
)

HTTP_METHODS = frozenset({"get", "post", "put", "delete", "patch", "head", "options"})
# Routing calls that only group or nest other routes.
ROUTE_CONTAINERS = frozenset({"route", "routing", "method"})

RECEIVE_FUNCTIONS = frozenset({"receive", "receiveNullable"})

# Respond functions that imply a content type.
RESPOND_CONTENT_TYPES = {
    "respondText": "text/plain",
    "respondBytes": "application/octet-stream",
    "respondBytesWriter": "application/octet-stream",
    "respondOutputStream": "application/octet-stream",
    "respondFile": "application/octet-stream",
    "respondHtml": "text/html",
}
# Argument types of respond functions that are not the response body.
RESPOND_NON_BODY_TYPES = frozenset({"HttpStatusCode", "ContentType", "Boolean", "Function1"})

HTTP_STATUS_CODES = {
    "Continue": "100",
    "SwitchingProtocols": "101",
    "OK": "200",
    "Created": "201",
    "Accepted": "202",
    "NonAuthoritativeInformation": "203",
    "NoContent": "204",
    "ResetContent": "205",
    "PartialContent": "206",
    "MultipleChoices": "300",
    "MovedPermanently": "301",
    "Found": "302",
    "SeeOther": "303",
    "NotModified": "304",
    "TemporaryRedirect": "307",
    "PermanentRedirect": "308",
    "BadRequest": "400",
    "Unauthorized": "401",
    "PaymentRequired": "402",
    "Forbidden": "403",
    "NotFound": "404",
    "MethodNotAllowed": "405",
    "NotAcceptable": "406",
    "RequestTimeout": "408",
    "Conflict": "409",
    "Gone": "410",
    "LengthRequired": "411",
    "PreconditionFailed": "412",
    "PayloadTooLarge": "413",
    "RequestURITooLong": "414",
    "UnsupportedMediaType": "415",
    "RequestedRangeNotSatisfiable": "416",
    "ExpectationFailed": "417",
    "UnprocessableEntity": "422",
    "Locked": "423",
    "FailedDependency": "424",
    "TooEarly": "425",
    "UpgradeRequired": "426",
    "TooManyRequests": "429",
    "RequestHeaderFieldTooLarge": "431",
    "InternalServerError": "500",
    "NotImplemented": "501",
    "BadGateway": "502",
    "ServiceUnavailable": "503",
    "GatewayTimeout": "504",
    "VersionNotSupported": "505",
    "VariantAlsoNegotiates": "506",
    "InsufficientStorage": "507",
}

# Receiver suffix of a parameter lookup -> parameter location (None: ambiguous).
PARAMETER_RECEIVERS = {
    "queryParameters": "query",
    "pathParameters": "path",
    "headers": "header",
    "cookies": "cookie",
    "parameters": None,
}
PARAMETER_FUNCTIONS = frozenset({"get", "getAll", "getOrFail", "contains"})

RESPONSE_HEADER_FUNCTIONS = {
    "header": "response",
    "append": "response.headers",
}

CONTENT_NEGOTIATION = "ContentNegotiation"
JSON_SERIALIZERS = ("json", "jackson", "gson")
XML_SERIALIZERS = ("xml",)

# Authentication provider -> (type, scheme, bearerFormat)
AUTH_PROVIDERS = {
    "basic": ("http", "basic", None),
    "digest": ("http", "digest", None),
    "bearer": ("http", "bearer", None),
    "jwt": ("http", "bearer", "JWT"),
    "oauth": ("oauth2", None, None),
}
