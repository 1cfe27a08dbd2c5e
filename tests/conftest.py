from pathlib import Path

import pytest
import yaml

from api_doc_extractor.facts.base import (
    Argument,
    CallSite,
    FactSheet,
    PropertyDecl,
    SourceFile,
    Span,
    TypeDecl,
    TypeExpr,
)

FIXTURES = Path(__file__).parent / "fixtures"

ROUTING = "io.ktor.server.routing"
AUTH = "io.ktor.server.auth"
REQUEST = "io.ktor.server.request"
RESPONSE = "io.ktor.server.response"


def call_span(text: str, snippet: str, occurrence: int = 0) -> tuple[int, int]:
    """Range of the call starting at ``snippet``, trailing lambda included."""
    start = -1
    for _ in range(occurrence + 1):
        start = text.index(snippet, start + 1)
    depth = 0
    opened = False
    i = start
    while i < len(text):
        c = text[i]
        if c == '"':
            i = text.index('"', i + 1)
        elif c in "([{":
            depth += 1
            opened = True
        elif c in ")]}":
            depth -= 1
            if depth == 0 and opened:
                j = i + 1
                while j < len(text) and text[j] == " ":
                    j += 1
                if j < len(text) and text[j] == "{":
                    i = j
                    continue
                return start, i + 1
        i += 1
    return start, len(text)


class KotlinSource:
    """A source file plus helpers to describe its calls as facts."""

    def __init__(self, path: str, text: str, namespace: str = "com.acme"):
        self.path = path
        self.text = text
        self.namespace = namespace

    @classmethod
    def fixture(cls, name: str) -> "KotlinSource":
        return cls(name, (FIXTURES / name).read_text(encoding="utf-8"))

    @property
    def source_file(self) -> SourceFile:
        return SourceFile(path=self.path, namespace=self.namespace, text=self.text)

    def span(self, snippet: str, occurrence: int = 0) -> Span:
        start, end = call_span(self.text, snippet, occurrence)
        return Span(file=self.path, start=start, end=end)

    def call(self, snippet: str, name: str | None = None, occurrence: int = 0, **facts) -> CallSite:
        start, end = call_span(self.text, snippet, occurrence)
        if name is None:
            head = snippet
            for stop in "(<[{ ":
                head = head.split(stop, 1)[0]
            name = head.rsplit(".", 1)[-1]
        return CallSite(file=self.path, start=start, end=end, name=name, **facts)

    def route(self, snippet: str, path: str | None = None, occurrence: int = 0, **facts) -> CallSite:
        if path is not None:
            facts.setdefault("arguments", [Argument(value=path)])
        return self.call(snippet, occurrence=occurrence, namespace=ROUTING, **facts)


def type_expr(name: str, *arguments: str, nullable: bool = False) -> TypeExpr:
    return TypeExpr(name=name, arguments=[TypeExpr(name=a) for a in arguments], nullable=nullable)


USER_TYPE = TypeDecl(
    name="com.acme.User",
    properties=[
        PropertyDecl(name="id", type=type_expr("kotlin.Int")),
        PropertyDecl(name="name", type=type_expr("kotlin.String")),
        PropertyDecl(name="email", type=type_expr("kotlin.String", nullable=True)),
        PropertyDecl(name="createdAt", type=type_expr("kotlinx.datetime.Instant"), contextual=True),
        PropertyDecl(name="manager", type=type_expr("com.acme.User", nullable=True)),
    ],
)


def build_app_facts() -> FactSheet:
    """Facts for the fixture application: routing in one file, route helpers in another."""
    app = KotlinSource.fixture("Application.kt")
    users = KotlinSource.fixture("UserRoutes.kt")
    user = type_expr("com.acme.User")

    calls = [
        app.call("install(ContentNegotiation)", arguments=[Argument(text="ContentNegotiation")]),
        app.call("install(Authentication)", arguments=[Argument(text="Authentication")]),
        app.call('jwt("auth-jwt")', namespace=f"{AUTH}.jwt", arguments=[Argument(value="auth-jwt")]),
        app.route("routing {"),
        app.route('route("/api")', path="/api"),
        app.call("userRoutes()", declaration=users.span("fun Route.userRoutes()")),
        app.call('authenticate("auth-jwt")', namespace=AUTH, arguments=[Argument(value="auth-jwt")]),
        app.call(
            'adminRoutes("/admin")',
            arguments=[Argument(value="/admin")],
            parameters=["prefix"],
            declaration=users.span("fun Route.adminRoutes("),
        ),
        users.route('get("/users")', path="/users"),
        users.call(
            "call.respond(repository.list())",
            namespace=RESPONSE,
            receiver="call",
            arguments=[Argument(text="repository.list()", type=type_expr("kotlin.collections.List", "com.acme.User"))],
        ),
        users.route('get("/users/{id}")', path="/users/{id}"),
        users.call('call.parameters["id"]', name="get", namespace="io.ktor.http", receiver="call.parameters", arguments=[Argument(value="id")]),
        users.call("call.respond(repository.find(id))", namespace=RESPONSE, receiver="call", arguments=[Argument(text="repository.find(id)", type=user)]),
        users.route('post("/users")', path="/users"),
        users.call("call.receive<User>()", namespace=REQUEST, receiver="call", type_arguments=[user], returns=user),
        users.call(
            'call.response.header("Location"',
            name="header",
            namespace=RESPONSE,
            receiver="call.response",
            arguments=[Argument(value="Location"), Argument(text='"/api/users/${user.id}"')],
        ),
        users.call(
            "call.respond(HttpStatusCode.Created, user)",
            namespace=RESPONSE,
            receiver="call",
            arguments=[
                Argument(text="HttpStatusCode.Created", type=type_expr("io.ktor.http.HttpStatusCode")),
                Argument(text="user", type=user),
            ],
        ),
        users.route('get("/internal/health")', path="/internal/health"),
        users.call('call.respondText("OK")', namespace=RESPONSE, receiver="call", arguments=[Argument(value="OK", type=type_expr("kotlin.String"))]),
        users.route("route(prefix)", arguments=[Argument(symbol="prefix", type=type_expr("kotlin.String"))]),
        users.route('delete("/users/{id}")', path="/users/{id}"),
        users.call(
            "call.respond(HttpStatusCode.NoContent)",
            namespace=RESPONSE,
            receiver="call",
            arguments=[Argument(text="HttpStatusCode.NoContent", type=type_expr("io.ktor.http.HttpStatusCode"))],
        ),
    ]
    return FactSheet(files=[app.source_file, users.source_file], calls=calls, types=[USER_TYPE])


@pytest.fixture
def app_facts() -> FactSheet:
    return build_app_facts()


@pytest.fixture
def app_facts_file(tmp_path) -> Path:
    """The fixture application written out as a fact sheet next to its sources."""
    sheet = build_app_facts()
    for source in sheet.files:
        (tmp_path / source.path).write_text(source.text, encoding="utf-8")
    data = sheet.model_dump(mode="json", exclude_none=True)
    for source in data["files"]:
        source.pop("text")
    facts_file = tmp_path / "facts.yaml"
    facts_file.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return facts_file
