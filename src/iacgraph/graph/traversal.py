"""
Read-only graph queries.

Direction semantics (edges point from dependent to dependency):
- downstream: follow edges backward, i.e. "what depends on this node"
- upstream:   follow edges forward,  i.e. "what this node depends on"

A missing start node yields an empty result, never an error.
"""

import time
from collections import deque
from enum import StrEnum
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from ..config import DEFAULT_MAX_DEPTH
from ..core.types import DependencyGraph, EdgeType, GraphEdge, Node


class TraversalDirection(StrEnum):
    DOWNSTREAM = "downstream"
    UPSTREAM = "upstream"
    BOTH = "both"


class TraversalOptions(BaseModel):
    max_depth: Optional[int] = DEFAULT_MAX_DEPTH  # None means unbounded
    include_start: bool = True
    edge_types: Optional[Set[EdgeType]] = None
    direction: TraversalDirection = TraversalDirection.DOWNSTREAM


class TraversalPath(BaseModel):
    start_node_id: str
    end_node_id: str
    node_ids: List[str]
    edge_ids: List[str] = Field(default_factory=list)
    length: int


class TraversalStats(BaseModel):
    nodes_visited: int = 0
    edges_traversed: int = 0
    max_depth_reached: int = 0
    traversal_time_ms: float = 0.0


class TraversalResult(BaseModel):
    nodes: List[Node] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    paths: List[TraversalPath] = Field(default_factory=list)
    stats: TraversalStats = Field(default_factory=TraversalStats)

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]


def _neighbors(graph: DependencyGraph, node_id: str, direction: TraversalDirection) -> Iterable[tuple]:
    """Yield (edge, next_node_id) pairs for one hop in ``direction``."""
    if direction in (TraversalDirection.UPSTREAM, TraversalDirection.BOTH):
        for edge in graph.outgoing_edges(node_id):
            yield edge, edge.target
    if direction in (TraversalDirection.DOWNSTREAM, TraversalDirection.BOTH):
        for edge in graph.incoming_edges(node_id):
            # Self-loops were already yielded as outgoing edges.
            if direction == TraversalDirection.BOTH and edge.source == edge.target:
                continue
            yield edge, edge.source


class TraversalEngine:
    """Breadth-first traversal over an immutable graph snapshot."""

    def get_downstream(
        self,
        graph: DependencyGraph,
        start_node_id: str,
        options: Optional[TraversalOptions] = None,
        **overrides,
    ) -> TraversalResult:
        """Nodes that transitively depend on ``start_node_id``."""
        opts = self._options(options, overrides, TraversalDirection.DOWNSTREAM)
        return self.traverse(graph, start_node_id, opts)

    def get_upstream(
        self,
        graph: DependencyGraph,
        start_node_id: str,
        options: Optional[TraversalOptions] = None,
        **overrides,
    ) -> TraversalResult:
        """Nodes that ``start_node_id`` transitively depends on."""
        opts = self._options(options, overrides, TraversalDirection.UPSTREAM)
        return self.traverse(graph, start_node_id, opts)

    def traverse(self, graph: DependencyGraph, start_node_id: str, options: TraversalOptions) -> TraversalResult:
        started = time.perf_counter()
        start_node = graph.get_node(start_node_id)
        if start_node is None:
            return TraversalResult(stats=TraversalStats(traversal_time_ms=(time.perf_counter() - started) * 1000))

        nodes: List[Node] = [start_node] if options.include_start else []
        edges: List[GraphEdge] = []
        paths: List[TraversalPath] = []
        depth_of: Dict[str, int] = {start_node_id: 0}
        max_depth_reached = 0

        queue = deque([(start_node_id, [start_node_id], [])])
        while queue:
            current, node_path, edge_path = queue.popleft()
            depth = len(node_path) - 1
            if options.max_depth is not None and depth >= options.max_depth:
                continue

            for edge, next_id in _neighbors(graph, current, options.direction):
                if options.edge_types and edge.type not in options.edge_types:
                    continue
                if next_id not in graph.nodes:
                    continue
                edges.append(edge)
                if next_id in depth_of:
                    continue

                depth_of[next_id] = depth + 1
                max_depth_reached = max(max_depth_reached, depth + 1)
                next_nodes = node_path + [next_id]
                next_edges = edge_path + [edge.id]
                nodes.append(graph.nodes[next_id])
                paths.append(TraversalPath(
                    start_node_id=start_node_id,
                    end_node_id=next_id,
                    node_ids=next_nodes,
                    edge_ids=next_edges,
                    length=depth + 1,
                ))
                queue.append((next_id, next_nodes, next_edges))

        return TraversalResult(
            nodes=nodes,
            edges=edges,
            paths=paths,
            stats=TraversalStats(
                nodes_visited=len(nodes),
                edges_traversed=len(edges),
                max_depth_reached=max_depth_reached,
                traversal_time_ms=(time.perf_counter() - started) * 1000,
            ),
        )

    def get_shortest_path(self, graph: DependencyGraph, source_id: str, target_id: str) -> Optional[TraversalPath]:
        """
        Unweighted shortest path following edge direction.

        Returns None when either endpoint is missing or no path exists.
        """
        if source_id not in graph.nodes or target_id not in graph.nodes:
            return None

        if source_id == target_id:
            return TraversalPath(
                start_node_id=source_id,
                end_node_id=target_id,
                node_ids=[source_id],
                length=0,
            )

        parents: Dict[str, tuple] = {}
        seen = {source_id}
        queue = deque([source_id])
        while queue:
            current = queue.popleft()
            for edge in graph.outgoing_edges(current):
                nxt = edge.target
                if nxt in seen or nxt not in graph.nodes:
                    continue
                seen.add(nxt)
                parents[nxt] = (current, edge.id)
                if nxt == target_id:
                    return self._unwind(parents, source_id, target_id)
                queue.append(nxt)
        return None

    @staticmethod
    def _unwind(parents: Dict[str, tuple], source_id: str, target_id: str) -> TraversalPath:
        node_ids = [target_id]
        edge_ids: List[str] = []
        while node_ids[-1] != source_id:
            prev, edge_id = parents[node_ids[-1]]
            node_ids.append(prev)
            edge_ids.append(edge_id)
        node_ids.reverse()
        edge_ids.reverse()
        return TraversalPath(
            start_node_id=source_id,
            end_node_id=target_id,
            node_ids=node_ids,
            edge_ids=edge_ids,
            length=len(edge_ids),
        )

    @staticmethod
    def _options(
        options: Optional[TraversalOptions],
        overrides: dict,
        direction: TraversalDirection,
    ) -> TraversalOptions:
        base = options or TraversalOptions()
        return base.model_copy(update={**overrides, "direction": direction})


_default_engine = TraversalEngine()


def get_downstream(graph: DependencyGraph, start_node_id: str, **options) -> TraversalResult:
    return _default_engine.get_downstream(graph, start_node_id, **options)


def get_upstream(graph: DependencyGraph, start_node_id: str, **options) -> TraversalResult:
    return _default_engine.get_upstream(graph, start_node_id, **options)


def get_shortest_path(graph: DependencyGraph, source_id: str, target_id: str) -> Optional[TraversalPath]:
    return _default_engine.get_shortest_path(graph, source_id, target_id)
