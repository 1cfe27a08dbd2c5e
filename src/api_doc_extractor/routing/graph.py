"""The call graph of routing declarations.

Nodes live in an arena and are referred to by integer id. Edges run from a
container to the calls made inside it. Construction is two-pass:

1. ``add`` registers nodes in source order and nests each one under the
   innermost enclosing route of the same file.
2. ``build`` runs once every file has been added and connects each helper
   call to the top-level calls inside the helper's declaration, which may
   live in another file.
"""

import logging
from bisect import bisect_left
from collections import defaultdict

from .nodes import FunctionNode, Node, RouteNode

logger = logging.getLogger(__name__)


class GraphError(RuntimeError):
    pass


class CallGraph:
    def __init__(self):
        self.nodes: list[Node] = []
        self.parents: list[list[int]] = []
        self.children: list[list[int]] = []
        self._routes: list[int] = []
        self._top_level: set[int] = set()
        # (file, start offset) -> node ids, plus sorted offsets per file
        self._lookup: dict[tuple[str, int], list[int]] = defaultdict(list)
        self._offsets: dict[str, list[int]] = defaultdict(list)
        self._built = False

    def __len__(self) -> int:
        return len(self.nodes)

    def add(self, node: Node) -> int:
        """Register ``node`` and nest it under the innermost enclosing route."""
        if self._built:
            raise GraphError("cannot add nodes after the graph has been built")
        node_id = len(self.nodes)
        self.nodes.append(node)
        self.parents.append([])
        self.children.append([])

        coordinates = node.coordinates
        key = (coordinates.file, coordinates.start)
        if key not in self._lookup:
            offsets = self._offsets[coordinates.file]
            offsets.insert(bisect_left(offsets, coordinates.start), coordinates.start)
        self._lookup[key].append(node_id)

        for route_id in reversed(self._routes):
            route = self.nodes[route_id]
            if route.coordinates.file != coordinates.file:
                break
            if route.contains(node):
                self.add_edge(route_id, node_id)
                break
            if route_id in self._top_level:
                break
        if not self.parents[node_id]:
            self._top_level.add(node_id)
        if isinstance(node, RouteNode):
            self._routes.append(node_id)
        return node_id

    def add_edge(self, parent: int, child: int) -> bool:
        """Connect ``parent`` to ``child`` unless that would close a cycle."""
        if child in self.children[parent]:
            return True
        if parent == child or self._reaches(child, parent):
            logger.warning(
                "Recursive call %s at %s:%d not followed",
                self.nodes[parent].call.name,
                self.nodes[parent].coordinates.file,
                self.nodes[parent].coordinates.start,
            )
            return False
        self.children[parent].append(child)
        self.parents[child].append(parent)
        return True

    def _reaches(self, start: int, target: int) -> bool:
        seen = set()
        pending = [start]
        while pending:
            current = pending.pop()
            if current == target:
                return True
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self.children[current])
        return False

    def nodes_within(self, file: str, start: int, end: int) -> list[int]:
        """Ids of the nodes whose invocation starts in ``[start, end)`` of ``file``."""
        offsets = self._offsets.get(file, [])
        found = []
        for i in range(bisect_left(offsets, start), len(offsets)):
            if offsets[i] >= end:
                break
            found.extend(self._lookup[(file, offsets[i])])
        return found

    def build(self) -> None:
        """Connect helper calls to the top-level calls in their declarations."""
        if self._built:
            return
        for node_id, node in enumerate(self.nodes):
            if not isinstance(node, FunctionNode):
                continue
            declaration = node.declaration
            for other_id in self.nodes_within(declaration.file, declaration.start, declaration.end):
                if other_id in self._top_level and node.contains(self.nodes[other_id]):
                    self.add_edge(node_id, other_id)
        self._built = True
        logger.info("Call graph built: %d nodes, %d roots", len(self.nodes), len(self.roots()))

    def roots(self) -> list[int]:
        return [node_id for node_id in range(len(self.nodes)) if not self.parents[node_id]]

    def find_all_paths_to_roots(self, node_id: int) -> list[list[int]]:
        """Every root-to-node path, root first."""
        paths: list[list[int]] = []

        def walk(current: int, suffix: list[int]) -> None:
            parents = self.parents[current]
            if not parents:
                paths.append(suffix)
                return
            for parent in parents:
                if parent in suffix:
                    continue
                walk(parent, [parent] + suffix)

        walk(node_id, [node_id])
        return paths
