from api_doc_extractor.extractor import Extractor
from api_doc_extractor.facts.base import Argument, FactSheet
from api_doc_extractor.parser.base import Parameter, ParamLocation, Response, Security, Summary, Tag
from api_doc_extractor.routing.collector import collect_routes

from conftest import RESPONSE, KotlinSource, type_expr

APP = """\
routing {
    route("/v1") {
        items()
    }
    // Version two.
    route("/v2") {
        items()
    }
}
"""

HELPERS = """\
fun Route.items() {
    get("/items") {
        call.respond(HttpStatusCode.OK)
    }
    // @ignore
    get("/hidden") {}
}
"""


def _two_prefixes() -> FactSheet:
    app = KotlinSource("App.kt", APP)
    helpers = KotlinSource("Helpers.kt", HELPERS)
    declaration = helpers.span("fun Route.items()")
    return FactSheet(
        files=[app.source_file, helpers.source_file],
        calls=[
            app.route("routing {"),
            app.route('route("/v1")', "/v1"),
            app.call("items()", declaration=declaration),
            app.route('route("/v2")', "/v2"),
            app.call("items()", occurrence=1, declaration=declaration),
            helpers.route('get("/items")', "/items"),
            helpers.call(
                "call.respond(",
                namespace=RESPONSE,
                arguments=[Argument(text="HttpStatusCode.OK", type=type_expr("io.ktor.http.HttpStatusCode"))],
            ),
            helpers.route('get("/hidden")', "/hidden"),
        ],
    )


def _routes(facts, **options):
    graph, _ = Extractor().build_graph(facts)
    return collect_routes(graph, **options)


def _by_key(routes):
    return {(route.method, route.path): route for route in routes}


class TestCollectRoutes:
    def test_one_route_per_path_to_root(self):
        routes = _routes(_two_prefixes())
        assert sorted((r.method, r.path) for r in routes) == [("get", "/v1/items"), ("get", "/v2/items")]

    def test_handler_calls_inferred(self):
        route = _by_key(_routes(_two_prefixes()))[("get", "/v1/items")]
        assert route.fields == [Response(status_code="200")]

    def test_inference_disabled(self):
        route = _by_key(_routes(_two_prefixes(), infer_from_calls=False))[("get", "/v1/items")]
        assert route.fields == []

    def test_parent_summary_not_inherited(self):
        route = _by_key(_routes(_two_prefixes()))[("get", "/v2/items")]
        assert not any(isinstance(f, Summary) for f in route.fields)

    def test_only_commented(self):
        src = KotlinSource("Routes.kt", 'routing {\n    get("/a") {}\n    // Docs.\n    get("/b") {}\n}\n')
        facts = FactSheet(
            files=[src.source_file],
            calls=[src.route("routing {"), src.route('get("/a")', "/a"), src.route('get("/b")', "/b")],
        )
        assert [r.path for r in _routes(facts, only_commented=True)] == ["/b"]
        assert [r.path for r in _routes(facts)] == ["/a", "/b"]


class TestApplicationRoutes:
    def test_routes(self, app_facts):
        keys = sorted(_by_key(_routes(app_facts)))
        assert keys == [
            ("delete", "/api/admin/users/{id}"),
            ("get", "/api/users"),
            ("get", "/api/users/{id}"),
            ("post", "/api/users"),
        ]

    def test_helper_tags_inherited(self, app_facts):
        route = _by_key(_routes(app_facts))[("get", "/api/users")]
        assert Tag(name="users") in route.fields
        assert Summary(text="Get a list of users.") in route.fields

    def test_documented_and_inferred_parameters_merge(self, app_facts):
        route = _by_key(_routes(app_facts))[("get", "/api/users/{id}")]
        params = [f for f in route.fields if isinstance(f, Parameter)]
        assert len(params) == 1
        assert params[0].location == ParamLocation.PATH
        assert params[0].type_ref.name == "Int"
        codes = [f.effective_code for f in route.fields if isinstance(f, Response)]
        assert codes == ["404", "200"]

    def test_security_from_enclosing_block(self, app_facts):
        route = _by_key(_routes(app_facts))[("delete", "/api/admin/users/{id}")]
        assert Security(scheme="auth-jwt") in route.fields
        assert [f.text for f in route.fields if isinstance(f, Summary)] == ["Remove a user."]
