"""
Incremental graph construction.

GraphBuilder is the only mutable view of a graph. It accumulates nodes and
edges (validating them on the way in when asked to) and materializes frozen
DependencyGraph snapshots on ``build()``. The builder stays usable after
``build()``; later mutations never leak into earlier snapshots.
"""

import logging
import time
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from ..core.exceptions import (
    DanglingSourceError,
    DanglingTargetError,
    InvalidEdgeError,
    InvalidNodeError,
)
from ..core.types import (
    DependencyGraph,
    EdgeMetadata,
    EdgeType,
    GraphEdge,
    GraphMetadata,
    Node,
)

logger = logging.getLogger(__name__)

EdgeKey = Tuple[str, str, EdgeType]


class GraphBuilderOptions(BaseModel):
    graph_id: Optional[str] = None
    validate_on_add: bool = True
    allow_duplicate_edges: bool = False


def _new_graph_id(prefix: str = "graph") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def edge_id_for(source: str, target: str, edge_type: EdgeType) -> str:
    """Deterministic edge id used by ``add_edge_by_ids``."""
    return f"{source}->{target}:{EdgeType(edge_type).value}"


class GraphBuilder:
    """
    Mutable accumulator for a DependencyGraph.

    Usage:
        builder = GraphBuilder()
        builder.add_node(vpc)
        builder.add_node(subnet)
        builder.add_edge_by_ids(subnet.id, vpc.id, EdgeType.REFERENCES)
        graph = builder.build()
    """

    def __init__(self, options: Optional[GraphBuilderOptions] = None, **overrides):
        base = options or GraphBuilderOptions()
        self.options = base.model_copy(update=overrides) if overrides else base
        self.graph_id = self.options.graph_id or _new_graph_id()
        self._nodes: Dict[str, Node] = {}
        self._edges: List[GraphEdge] = []
        self._outgoing: Dict[str, List[GraphEdge]] = defaultdict(list)
        self._incoming: Dict[str, List[GraphEdge]] = defaultdict(list)
        self._edge_keys: Dict[EdgeKey, int] = defaultdict(int)
        self._start = time.perf_counter()

    # --- Nodes ---

    def add_node(self, node: Node) -> None:
        """Insert a node, replacing any node with the same id."""
        if self.options.validate_on_add and not node.id:
            raise InvalidNodeError(node.id)
        self._nodes[node.id] = node

    def add_nodes(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            self.add_node(node)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def remove_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it."""
        if node_id not in self._nodes:
            return False

        touching = {id(e): e for e in self._outgoing.get(node_id, [])}
        touching.update({id(e): e for e in self._incoming.get(node_id, [])})
        for edge in touching.values():
            self._drop_edge(edge)

        del self._nodes[node_id]
        self._outgoing.pop(node_id, None)
        self._incoming.pop(node_id, None)
        return True

    # --- Edges ---

    def add_edge(self, edge: GraphEdge) -> None:
        """
        Add an edge.

        Raises:
            InvalidEdgeError: id, source or target missing (validation on).
            DanglingSourceError / DanglingTargetError: endpoint not in the
                node set (validation on).
        """
        if self.options.validate_on_add:
            self._validate_edge(edge)

        key = (edge.source, edge.target, edge.type)
        if not self.options.allow_duplicate_edges and self._edge_keys.get(key):
            logger.debug("Skipping duplicate edge %s", edge.id)
            return

        self._edges.append(edge)
        self._outgoing[edge.source].append(edge)
        self._incoming[edge.target].append(edge)
        self._edge_keys[key] += 1

    def add_edges(self, edges: Iterable[GraphEdge]) -> None:
        for edge in edges:
            self.add_edge(edge)

    def add_edge_by_ids(
        self,
        source_id: str,
        target_id: str,
        edge_type: EdgeType,
        metadata: Optional[Dict] = None,
        label: Optional[str] = None,
    ) -> GraphEdge:
        """Create an edge with a deterministic id and add it."""
        edge = GraphEdge(
            id=edge_id_for(source_id, target_id, edge_type),
            source=source_id,
            target=target_id,
            type=edge_type,
            label=label,
            metadata=EdgeMetadata(**{"implicit": False, "confidence": 100, **(metadata or {})}),
        )
        self.add_edge(edge)
        return edge

    def has_edge(self, source_id: str, target_id: str, edge_type: Optional[EdgeType] = None) -> bool:
        if edge_type is not None:
            return self._edge_keys.get((source_id, target_id, EdgeType(edge_type)), 0) > 0
        return any(e.target == target_id for e in self._outgoing.get(source_id, []))

    def get_edges(self) -> List[GraphEdge]:
        return list(self._edges)

    def get_outgoing_edges(self, node_id: str) -> List[GraphEdge]:
        return list(self._outgoing.get(node_id, []))

    def get_incoming_edges(self, node_id: str) -> List[GraphEdge]:
        return list(self._incoming.get(node_id, []))

    def remove_edge(self, edge_id: str) -> bool:
        """Remove the first edge carrying ``edge_id``."""
        for index, edge in enumerate(self._edges):
            if edge.id == edge_id:
                del self._edges[index]
                _remove_first(self._outgoing.get(edge.source, []), edge)
                _remove_first(self._incoming.get(edge.target, []), edge)
                self._release_key(edge, 1)
                return True
        return False

    # --- Lifecycle ---

    def build(self) -> DependencyGraph:
        """Materialize an immutable snapshot of the current state."""
        node_counts: Dict[str, int] = defaultdict(int)
        source_files: Dict[str, None] = {}
        for node in self._nodes.values():
            node_counts[node.type.value] += 1
            if node.location and node.location.file:
                source_files[node.location.file] = None

        edge_counts: Dict[str, int] = defaultdict(int)
        for edge in self._edges:
            edge_counts[edge.type.value] += 1

        metadata = GraphMetadata(
            created_at=datetime.now(timezone.utc),
            source_files=list(source_files),
            node_counts=dict(node_counts),
            edge_counts=dict(edge_counts),
            build_time_ms=(time.perf_counter() - self._start) * 1000,
        )
        return DependencyGraph(
            id=self.graph_id,
            nodes=dict(self._nodes),
            edges=tuple(self._edges),
            metadata=metadata,
        )

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()
        self._outgoing.clear()
        self._incoming.clear()
        self._edge_keys.clear()
        self._start = time.perf_counter()

    # --- Internals ---

    def _validate_edge(self, edge: GraphEdge) -> None:
        if not edge.id:
            raise InvalidEdgeError(edge.id, "Edge must have an id")
        if not edge.source:
            raise InvalidEdgeError(edge.id, "Edge must have a source")
        if not edge.target:
            raise InvalidEdgeError(edge.id, "Edge must have a target")
        if edge.source not in self._nodes:
            raise DanglingSourceError(edge.id, edge.source)
        if edge.target not in self._nodes:
            raise DanglingTargetError(edge.id, edge.target)

    def _drop_edge(self, edge: GraphEdge) -> None:
        # The same edge object may have been added more than once.
        before = len(self._edges)
        self._edges = [e for e in self._edges if e is not edge]
        removed = before - len(self._edges)
        if not removed:
            return

        outgoing = self._outgoing.get(edge.source)
        if outgoing is not None:
            outgoing[:] = [e for e in outgoing if e is not edge]
        incoming = self._incoming.get(edge.target)
        if incoming is not None:
            incoming[:] = [e for e in incoming if e is not edge]

        self._release_key(edge, removed)

    def _release_key(self, edge: GraphEdge, count: int) -> None:
        key = (edge.source, edge.target, edge.type)
        self._edge_keys[key] -= count
        if self._edge_keys[key] <= 0:
            del self._edge_keys[key]


def _remove_first(edges: List[GraphEdge], edge: GraphEdge) -> None:
    for index, candidate in enumerate(edges):
        if candidate is edge:
            del edges[index]
            return


def create_graph_builder(options: Optional[GraphBuilderOptions] = None, **overrides) -> GraphBuilder:
    return GraphBuilder(options, **overrides)


def create_empty_graph(graph_id: Optional[str] = None) -> DependencyGraph:
    return DependencyGraph(id=graph_id or _new_graph_id(), metadata=GraphMetadata())
