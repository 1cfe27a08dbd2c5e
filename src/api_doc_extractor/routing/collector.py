"""Resolving endpoints from the call graph.

Every endpoint node is resolved once per path from a root to it. Fields are
folded root to leaf with the node closer to the leaf winning, then the call
features inside the handler are folded in.
"""

import logging

from pydantic import BaseModel, ConfigDict

from api_doc_extractor.merge import merge_fields
from api_doc_extractor.parser.base import DocumentationField, Ignore, Method, PathSegment

from .graph import CallGraph
from .nodes import CallFeatureNode, FunctionNode, Node, RouteNode
from .stack import RouteStack

logger = logging.getLogger(__name__)


class ResolvedRoute(BaseModel):
    """The merged documentation of one endpoint reached along one path."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: str
    fields: list[DocumentationField]


def _fields(node: Node, stack: RouteStack) -> list[DocumentationField]:
    try:
        return node.fields(stack)
    except (ValueError, LookupError) as e:
        logger.warning(
            "Fields of %s at %s:%d skipped: %s",
            node.call.name,
            node.coordinates.file,
            node.coordinates.start,
            e,
        )
        return []


def _handler_fields(graph: CallGraph, node_id: int, stack: RouteStack) -> list[DocumentationField]:
    fields: list[DocumentationField] = []
    for child_id in graph.children[node_id]:
        child = graph.nodes[child_id]
        match child:
            case CallFeatureNode():
                fields = merge_fields(fields, _fields(child, stack))
            case FunctionNode():
                fields = merge_fields(fields, _fields(child, stack))
                fields = merge_fields(fields, _handler_fields(graph, child_id, stack.push(child)))
            case RouteNode():
                continue
    return fields


def resolve_path(graph: CallGraph, path: list[int], infer_from_calls: bool = True) -> ResolvedRoute | None:
    """Fold the fields of one root-to-leaf path into a resolved route."""
    fields: list[DocumentationField] = []
    stack = RouteStack()
    for node_id in path:
        node = graph.nodes[node_id]
        fields = merge_fields(_fields(node, stack), fields)
        stack = stack.push(node)
    if infer_from_calls:
        fields = merge_fields(fields, _handler_fields(graph, path[-1], stack))

    leaf = graph.nodes[path[-1]].coordinates
    if any(isinstance(f, Ignore) for f in fields):
        logger.debug("Route at %s:%d ignored", leaf.file, leaf.start)
        return None
    route_path = next((f.segment for f in fields if isinstance(f, PathSegment)), None)
    method = next((f.name for f in fields if isinstance(f, Method)), None)
    if route_path is None or method is None:
        logger.debug("Route at %s:%d has no path or method", leaf.file, leaf.start)
        return None
    return ResolvedRoute(
        path=route_path,
        method=method,
        fields=[f for f in fields if not isinstance(f, (PathSegment, Method))],
    )


def collect_routes(
    graph: CallGraph, infer_from_calls: bool = True, only_commented: bool = False
) -> list[ResolvedRoute]:
    """Resolve every endpoint of the graph along every path that reaches it."""
    routes = []
    for node_id, node in enumerate(graph.nodes):
        if not isinstance(node, RouteNode) or node.method is None:
            continue
        if only_commented and not node.documented:
            continue
        for path in graph.find_all_paths_to_roots(node_id):
            route = resolve_path(graph, path, infer_from_calls)
            if route is not None:
                routes.append(route)
    logger.info("Resolved %d routes", len(routes))
    return routes
