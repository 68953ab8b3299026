"""
Cycle enumeration backed by rustworkx.

Strongly connected components are computed on a rustworkx index graph that
mirrors the snapshot (string ids mapped to integer indices). Every component
with more than one node, or a single node with a self-loop, is one cycle.
"""

import logging
import time
from collections import deque
from typing import Dict, List, Optional, Set, Tuple

import rustworkx as rx
from pydantic import BaseModel, Field

from ..core.types import DependencyGraph, GraphEdge

logger = logging.getLogger(__name__)


class DetectedCycle(BaseModel):
    """
    One cyclic component.

    ``node_ids`` lists the shortest closed walk from the first member back to
    itself, followed by any other members of the component. ``length`` is the
    number of edges in that closed walk.
    """
    node_ids: List[str]
    edge_ids: List[str] = Field(default_factory=list)
    length: int


class CycleDetectionStats(BaseModel):
    cycles_found: int = 0
    nodes_in_cycles: int = 0
    detection_time_ms: float = 0.0


class CycleDetectionResult(BaseModel):
    has_cycles: bool
    cycles: List[DetectedCycle] = Field(default_factory=list)
    stats: CycleDetectionStats = Field(default_factory=CycleDetectionStats)


def build_index_graph(graph: DependencyGraph) -> Tuple[rx.PyDiGraph, Dict[str, int], Dict[int, str]]:
    """
    Mirror a snapshot into a rustworkx multigraph.

    Edges with an endpoint outside the node set are left out. Node indices
    follow node insertion order.
    """
    index_graph = rx.PyDiGraph(multigraph=True)
    id_to_idx: Dict[str, int] = {}
    idx_to_id: Dict[int, str] = {}
    for node_id in graph.nodes:
        idx = index_graph.add_node(node_id)
        id_to_idx[node_id] = idx
        idx_to_id[idx] = node_id

    for edge in graph.edges:
        if edge.source in id_to_idx and edge.target in id_to_idx:
            index_graph.add_edge(id_to_idx[edge.source], id_to_idx[edge.target], edge)
    return index_graph, id_to_idx, idx_to_id


class CycleDetector:
    """Enumerates cycles as strongly connected components."""

    def detect_cycles(self, graph: DependencyGraph) -> CycleDetectionResult:
        start = time.perf_counter()
        index_graph, _, idx_to_id = build_index_graph(graph)

        components = [sorted(c) for c in rx.strongly_connected_components(index_graph)]
        components.sort(key=lambda c: c[0])

        cycles: List[DetectedCycle] = []
        nodes_in_cycles: Set[str] = set()
        for component in components:
            members = [idx_to_id[idx] for idx in component]
            if len(members) == 1 and not self._has_self_loop(graph, members[0]):
                continue

            cycle = self._closed_walk(graph, members)
            cycles.append(cycle)
            nodes_in_cycles.update(cycle.node_ids)

        elapsed_ms = (time.perf_counter() - start) * 1000
        if cycles:
            logger.debug("Detected %d cycle(s) across %d node(s)", len(cycles), len(nodes_in_cycles))

        return CycleDetectionResult(
            has_cycles=bool(cycles),
            cycles=cycles,
            stats=CycleDetectionStats(
                cycles_found=len(cycles),
                nodes_in_cycles=len(nodes_in_cycles),
                detection_time_ms=elapsed_ms,
            ),
        )

    @staticmethod
    def _has_self_loop(graph: DependencyGraph, node_id: str) -> bool:
        return any(e.target == node_id for e in graph.outgoing_edges(node_id))

    @staticmethod
    def _closed_walk(graph: DependencyGraph, members: List[str]) -> DetectedCycle:
        """BFS for the shortest walk from the first member back to itself."""
        start = members[0]
        allowed = set(members)
        parents: Dict[str, Tuple[str, GraphEdge]] = {}
        queue = deque([start])
        seen = {start}
        closing: Optional[GraphEdge] = None

        while queue and closing is None:
            current = queue.popleft()
            for edge in graph.outgoing_edges(current):
                if edge.target not in allowed or (edge.target == current and len(members) > 1):
                    continue
                if edge.target == start:
                    closing = edge
                    break
                if edge.target not in seen:
                    seen.add(edge.target)
                    parents[edge.target] = (current, edge)
                    queue.append(edge.target)

        if closing is None:
            return DetectedCycle(node_ids=list(members), length=len(members))

        walk_nodes = [closing.source]
        walk_edges = [closing]
        while walk_nodes[-1] != start:
            prev, edge = parents[walk_nodes[-1]]
            walk_nodes.append(prev)
            walk_edges.append(edge)
        walk_nodes.reverse()
        walk_edges.reverse()

        rest = [m for m in members if m not in set(walk_nodes)]
        return DetectedCycle(
            node_ids=walk_nodes + rest,
            edge_ids=[e.id for e in walk_edges],
            length=len(walk_edges),
        )


def detect_cycles(graph: DependencyGraph) -> CycleDetectionResult:
    """Convenience wrapper around ``CycleDetector``."""
    return CycleDetector().detect_cycles(graph)
