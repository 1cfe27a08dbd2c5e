import pytest

from api_doc_extractor.facts.base import Argument, CallSite, TypeExpr
from api_doc_extractor.routing.graph import CallGraph, GraphError
from api_doc_extractor.routing.nodes import CallFeatureNode, FunctionNode, RouteNode
from api_doc_extractor.routing.stack import RouteStack

from conftest import KotlinSource


def _route(call, path=None, method=None):
    argument = Argument(value=path) if path is not None else None
    return RouteNode(call=call, resolver=lambda stack: [], path_argument=argument, method=method)


def _feature(call):
    return CallFeatureNode(call=call, resolver=lambda stack: [])


def _function(call, declaration, **bindings):
    return FunctionNode(call=call, declaration=declaration, resolver=lambda stack: [], bindings=bindings)


NESTED = """\
routing {
    route("/a") {
        get("/b") {
            call.respond(1)
        }
    }
    post("/c") {}
}
"""

APP = """\
routing {
    route("/v1") {
        items()
    }
    route("/v2") {
        items()
    }
}
"""

HELPERS = """\
fun Route.items() {
    get("/items") {}
}

fun Route.tree() {
    route("/node") {
        tree()
    }
}
"""


class TestNesting:
    def test_innermost_route_wins(self):
        src = KotlinSource("Nested.kt", NESTED)
        graph = CallGraph()
        routing = graph.add(_route(src.route("routing {")))
        route = graph.add(_route(src.route('route("/a")'), "/a"))
        get = graph.add(_route(src.route('get("/b")'), "/b", "get"))
        respond = graph.add(_feature(src.call("call.respond(1)")))
        post = graph.add(_route(src.route('post("/c")'), "/c", "post"))

        assert graph.children[routing] == [route, post]
        assert graph.children[route] == [get]
        assert graph.children[get] == [respond]
        assert graph.roots() == [routing]

    def test_routes_in_other_files_do_not_nest(self):
        app = KotlinSource("App.kt", APP)
        helpers = KotlinSource("Helpers.kt", HELPERS)
        graph = CallGraph()
        graph.add(_route(app.route("routing {")))
        get = graph.add(_route(helpers.route('get("/items")'), "/items", "get"))
        assert get in graph.roots()

    def test_nodes_within(self):
        src = KotlinSource("Nested.kt", NESTED)
        graph = CallGraph()
        graph.add(_route(src.route("routing {")))
        route = graph.add(_route(src.route('route("/a")'), "/a"))
        get = graph.add(_route(src.route('get("/b")'), "/b", "get"))
        span = src.span('route("/a")')
        assert graph.nodes_within("Nested.kt", span.start, span.end) == [route, get]
        assert graph.nodes_within("Other.kt", 0, 1000) == []


class TestBuild:
    def _graph(self):
        app = KotlinSource("App.kt", APP)
        helpers = KotlinSource("Helpers.kt", HELPERS)
        declaration = helpers.span("fun Route.items()")
        graph = CallGraph()
        ids = {
            "routing": graph.add(_route(app.route("routing {"))),
            "v1": graph.add(_route(app.route('route("/v1")'), "/v1")),
            "items1": graph.add(_function(app.call("items()"), declaration)),
            "v2": graph.add(_route(app.route('route("/v2")'), "/v2")),
            "items2": graph.add(_function(app.call("items()", occurrence=1), declaration)),
            "get": graph.add(_route(helpers.route('get("/items")'), "/items", "get")),
        }
        return graph, ids

    def test_helper_calls_connect_to_declaration(self):
        graph, ids = self._graph()
        graph.build()
        assert graph.children[ids["items1"]] == [ids["get"]]
        assert graph.children[ids["items2"]] == [ids["get"]]
        assert graph.roots() == [ids["routing"]]

    def test_every_path_to_the_root(self):
        graph, ids = self._graph()
        graph.build()
        paths = graph.find_all_paths_to_roots(ids["get"])
        assert sorted(paths) == sorted(
            [
                [ids["routing"], ids["v1"], ids["items1"], ids["get"]],
                [ids["routing"], ids["v2"], ids["items2"], ids["get"]],
            ]
        )

    def test_recursive_helper_is_not_followed(self, caplog):
        app = KotlinSource("App.kt", "routing {\n    tree()\n}\n")
        helpers = KotlinSource("Helpers.kt", HELPERS)
        declaration = helpers.span("fun Route.tree()")
        graph = CallGraph()
        routing = graph.add(_route(app.route("routing {")))
        outer = graph.add(_function(app.call("tree()"), declaration))
        node = graph.add(_route(helpers.route('route("/node")'), "/node"))
        inner = graph.add(_function(helpers.call("tree()", occurrence=1), declaration))
        graph.build()

        assert graph.children[outer] == [node]
        assert graph.children[inner] == []
        assert "Recursive call tree" in caplog.text
        assert graph.find_all_paths_to_roots(inner) == [[routing, outer, node, inner]]

    def test_no_nodes_after_build(self):
        graph, _ = self._graph()
        graph.build()
        with pytest.raises(GraphError):
            graph.add(_route(CallSite(file="App.kt", start=0, end=1, name="get")))

    def test_self_edge_refused(self):
        graph, ids = self._graph()
        assert graph.add_edge(ids["get"], ids["get"]) is False


class TestRouteStack:
    def _call(self, name="f"):
        return CallSite(file="A.kt", start=0, end=1, name=name)

    def _declaration(self):
        return KotlinSource("A.kt", "fun f() {}").span("fun f()")

    def test_literals(self):
        stack = RouteStack()
        assert stack.resolve(Argument(value="/users")) == "/users"
        assert stack.resolve(Argument(value=True)) == "true"
        assert stack.resolve(Argument(value=3)) == "3"
        assert stack.resolve(None) is None

    def test_symbol_bound_by_enclosing_helper(self):
        helper = _function(self._call(), self._declaration(), prefix=Argument(value="/admin"))
        stack = RouteStack().push(helper)
        assert stack.resolve(Argument(symbol="prefix")) == "/admin"

    def test_symbol_forwarded_through_helpers(self):
        outer = _function(self._call("outer"), self._declaration(), base=Argument(value="/v1"))
        inner = _function(self._call("inner"), self._declaration(), prefix=Argument(symbol="base"))
        stack = RouteStack().push(outer).push(inner)
        assert stack.resolve(Argument(symbol="prefix")) == "/v1"

    def test_unbound_symbol(self, caplog):
        assert RouteStack().resolve(Argument(symbol="prefix")) is None
        assert "prefix" in caplog.text

    def test_path(self):
        helper = _function(self._call(), self._declaration(), prefix=Argument(value="/admin"))
        api = _route(self._call("route"), "/api")
        group = RouteNode(call=self._call("route"), resolver=lambda stack: [], path_argument=Argument(symbol="prefix"))
        leaf = _route(self._call("get"), "/users/{id}", "get")
        stack = RouteStack((api, helper, group, leaf))
        assert stack.path() == "/api/admin/users/{id}"
        assert RouteStack().path() == "/"

    def _generic(self, name, **type_bindings):
        return FunctionNode(
            call=self._call(name),
            declaration=self._declaration(),
            resolver=lambda stack: [],
            type_bindings=type_bindings,
        )

    def test_type_parameter_bound_by_enclosing_helper(self):
        stack = RouteStack().push(self._generic("crud", T=TypeExpr(name="com.acme.User")))
        assert stack.resolve_type(TypeExpr(name="T")) == TypeExpr(name="com.acme.User")
        assert stack.resolve_type(TypeExpr(name="kotlin.collections.List", arguments=[TypeExpr(name="T")])) == (
            TypeExpr(name="kotlin.collections.List", arguments=[TypeExpr(name="com.acme.User")])
        )

    def test_type_parameter_keeps_nullability(self):
        stack = RouteStack().push(self._generic("crud", T=TypeExpr(name="com.acme.User")))
        assert stack.resolve_type(TypeExpr(name="T", nullable=True)) == TypeExpr(name="com.acme.User", nullable=True)

    def test_type_parameter_forwarded_through_helpers(self):
        outer = self._generic("outer", E=TypeExpr(name="com.acme.Order"))
        inner = self._generic("inner", T=TypeExpr(name="E"))
        stack = RouteStack().push(outer).push(inner)
        assert stack.resolve_type(TypeExpr(name="T")) == TypeExpr(name="com.acme.Order")

    def test_innermost_type_binding_wins(self):
        outer = self._generic("outer", T=TypeExpr(name="com.acme.Order"))
        inner = self._generic("inner", T=TypeExpr(name="com.acme.User"))
        stack = RouteStack().push(outer).push(inner)
        assert stack.resolve_type(TypeExpr(name="T")) == TypeExpr(name="com.acme.User")

    def test_unbound_type_unchanged(self):
        assert RouteStack().resolve_type(TypeExpr(name="T")) == TypeExpr(name="T")
        assert RouteStack().resolve_type(None) is None
