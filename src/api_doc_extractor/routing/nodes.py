"""Route graph nodes.

A node wraps one call site. Its documentation fields are not stored: they
are computed from the stack of ancestors the node is reached through, since
a helper function's arguments (and with them paths and parameter names)
differ per invocation.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Union

from api_doc_extractor.facts.base import Argument, CallSite, Span, TypeExpr
from api_doc_extractor.parser.base import DocumentationField

if TYPE_CHECKING:
    from .stack import RouteStack

FieldResolver = Callable[["RouteStack"], list[DocumentationField]]


@dataclass(eq=False)
class RouteNode:
    """A routing declaration: an endpoint, a route group or an auth block."""

    call: CallSite
    resolver: FieldResolver
    path_argument: Argument | None = None
    method: str | None = None
    documented: bool = False

    @property
    def coordinates(self) -> Span:
        return self.call.span

    def contains(self, other: "Node") -> bool:
        return self.coordinates.contains(other.coordinates)

    def fields(self, stack: "RouteStack") -> list[DocumentationField]:
        return self.resolver(stack)


@dataclass(eq=False)
class CallFeatureNode:
    """A call inside a handler that says something about the operation."""

    call: CallSite
    resolver: FieldResolver

    @property
    def coordinates(self) -> Span:
        return self.call.span

    def contains(self, other: "Node") -> bool:
        return False

    def fields(self, stack: "RouteStack") -> list[DocumentationField]:
        return self.resolver(stack)


@dataclass(eq=False)
class FunctionNode:
    """A call to a helper whose declaration holds further routing calls."""

    call: CallSite
    declaration: Span
    resolver: FieldResolver
    bindings: dict[str, Argument] = field(default_factory=dict)
    type_bindings: dict[str, TypeExpr] = field(default_factory=dict)

    @property
    def coordinates(self) -> Span:
        return self.call.span

    def contains(self, other: "Node") -> bool:
        return self.declaration.contains(other.coordinates)

    def fields(self, stack: "RouteStack") -> list[DocumentationField]:
        return self.resolver(stack)


Node = Union[RouteNode, CallFeatureNode, FunctionNode]
