"""The ancestor stack a node's fields are computed against."""

import logging
from dataclasses import dataclass

from api_doc_extractor.facts.base import Argument, TypeExpr
from api_doc_extractor.merge import join_paths

from .nodes import FunctionNode, Node, RouteNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteStack:
    """Immutable root-first list of the nodes enclosing the current one."""

    nodes: tuple[Node, ...] = ()

    def push(self, node: Node) -> "RouteStack":
        return RouteStack(self.nodes + (node,))

    def __len__(self) -> int:
        return len(self.nodes)

    def resolve(self, argument: Argument | None) -> str | None:
        """Evaluate an argument to a string.

        Literals evaluate to themselves. A symbol is looked up in the
        bindings of the innermost enclosing helper call that binds it, and
        that binding is evaluated against the stack outside the helper.
        """
        if argument is None:
            return None
        if argument.value is not None:
            if isinstance(argument.value, bool):
                return str(argument.value).lower()
            return str(argument.value)
        if argument.symbol is None:
            return None
        for depth in range(len(self.nodes) - 1, -1, -1):
            node = self.nodes[depth]
            if isinstance(node, FunctionNode) and argument.symbol in node.bindings:
                return RouteStack(self.nodes[:depth]).resolve(node.bindings[argument.symbol])
        logger.warning("Cannot resolve %r: no enclosing call binds it", argument.symbol)
        return None

    def resolve_type(self, type_expr: TypeExpr | None) -> TypeExpr | None:
        """Substitute the type parameters of enclosing helper calls in ``type_expr``.

        Each helper's type arguments are themselves substituted with the
        bindings of the helpers outside it, so the innermost binding wins.
        """
        if type_expr is None:
            return None
        scope: dict[str, TypeExpr] = {}
        for node in self.nodes:
            if isinstance(node, FunctionNode) and node.type_bindings:
                inner = {name: bound.substitute(scope) for name, bound in node.type_bindings.items()}
                scope = {**scope, **inner}
        return type_expr.substitute(scope) if scope else type_expr

    def path(self) -> str:
        """The route path formed by the route nodes on the stack."""
        path = "/"
        for depth, node in enumerate(self.nodes):
            if isinstance(node, RouteNode) and node.path_argument is not None:
                segment = RouteStack(self.nodes[:depth]).resolve(node.path_argument)
                if segment:
                    path = join_paths(path, segment)
        return path
