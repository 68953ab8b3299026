"""
Structural validation of built graphs.

Dangling endpoints are errors. Self-loops, orphan nodes and cycles are
reported as warnings and never make a graph invalid.
"""

import logging
from typing import Dict, List, Optional

import rustworkx as rx
from pydantic import BaseModel, Field

from ..core.types import DependencyGraph
from .cycles import CycleDetector, DetectedCycle, build_index_graph

logger = logging.getLogger(__name__)

# Issue codes
DANGLING_SOURCE = "DANGLING_SOURCE"
DANGLING_TARGET = "DANGLING_TARGET"
SELF_LOOP = "SELF_LOOP"
ORPHAN_NODE = "ORPHAN_NODE"
CYCLE_DETECTED = "CYCLE_DETECTED"

_WHITE, _GRAY, _BLACK = 0, 1, 2


class ValidationIssue(BaseModel):
    code: str
    message: str
    node_id: Optional[str] = None
    edge_id: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)


class GraphValidator:
    """Checks a DependencyGraph for structural soundness."""

    def __init__(self, cycle_detector: Optional[CycleDetector] = None):
        self.cycle_detector = cycle_detector or CycleDetector()

    def validate(self, graph: DependencyGraph) -> ValidationResult:
        errors: List[ValidationIssue] = []
        warnings: List[ValidationIssue] = []

        for edge in graph.edges:
            if edge.source not in graph.nodes:
                errors.append(ValidationIssue(
                    code=DANGLING_SOURCE,
                    message=f"Edge {edge.id} references non-existent source node: {edge.source}",
                    edge_id=edge.id,
                ))
            if edge.target not in graph.nodes:
                errors.append(ValidationIssue(
                    code=DANGLING_TARGET,
                    message=f"Edge {edge.id} references non-existent target node: {edge.target}",
                    edge_id=edge.id,
                ))

        for edge in graph.edges:
            if edge.is_self_loop():
                warnings.append(ValidationIssue(
                    code=SELF_LOOP,
                    message=f"Edge {edge.id} is a self-loop",
                    edge_id=edge.id,
                ))

        for orphan_id in self.find_orphan_nodes(graph):
            warnings.append(ValidationIssue(
                code=ORPHAN_NODE,
                message=f"Node {orphan_id} has no connections",
                node_id=orphan_id,
            ))

        if self.has_cycles(graph):
            warnings.append(ValidationIssue(
                code=CYCLE_DETECTED,
                message="Graph contains one or more cycles",
            ))

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    def has_cycles(self, graph: DependencyGraph) -> bool:
        """
        Three-color depth-first search.

        A back-edge into a gray (in-progress) node means a cycle. Iterative so
        that long dependency chains do not hit the recursion limit.
        """
        color: Dict[str, int] = {node_id: _WHITE for node_id in graph.nodes}

        for root in graph.nodes:
            if color[root] != _WHITE:
                continue
            color[root] = _GRAY
            stack = [(root, iter(graph.outgoing_edges(root)))]
            while stack:
                node_id, edges = stack[-1]
                advanced = False
                for edge in edges:
                    target = edge.target
                    if target not in color:
                        continue
                    if color[target] == _GRAY:
                        return True
                    if color[target] == _WHITE:
                        color[target] = _GRAY
                        stack.append((target, iter(graph.outgoing_edges(target))))
                        advanced = True
                        break
                if not advanced:
                    color[node_id] = _BLACK
                    stack.pop()
        return False

    def find_cycles(self, graph: DependencyGraph) -> List[DetectedCycle]:
        return self.cycle_detector.detect_cycles(graph).cycles

    def get_topological_order(self, graph: DependencyGraph) -> Optional[List[str]]:
        """Dependents before their dependencies, or None when the graph is cyclic."""
        index_graph, _, idx_to_id = build_index_graph(graph)
        try:
            order = rx.topological_sort(index_graph)
        except rx.DAGHasCycle:
            return None
        return [idx_to_id[idx] for idx in order]

    def find_orphan_nodes(self, graph: DependencyGraph) -> List[str]:
        connected = set()
        for edge in graph.edges:
            connected.add(edge.source)
            connected.add(edge.target)
        return [node_id for node_id in graph.nodes if node_id not in connected]

    def find_unreachable_nodes(self, graph: DependencyGraph, start_node_id: str) -> List[str]:
        """Nodes not reachable from ``start_node_id`` along outgoing edges."""
        if start_node_id not in graph.nodes:
            return list(graph.nodes)

        index_graph, id_to_idx, _ = build_index_graph(graph)
        start_idx = id_to_idx[start_node_id]
        reachable = rx.descendants(index_graph, start_idx)
        reachable.add(start_idx)
        return [node_id for node_id, idx in id_to_idx.items() if idx not in reachable]


def validate_graph(graph: DependencyGraph) -> ValidationResult:
    return GraphValidator().validate(graph)
