"""
Subgraph extraction.
"""

from typing import List, Optional, Set

from pydantic import BaseModel

from ..core.types import DependencyGraph, EdgeType, NodeType
from .builder import GraphBuilder
from .traversal import TraversalEngine, TraversalDirection, TraversalOptions


class SubgraphOptions(BaseModel):
    """
    Selection criteria for ``extract_subgraph``.

    Seeds come from ``node_ids`` and ``node_types``; with neither set the
    result is empty.
    """
    node_ids: Optional[List[str]] = None
    node_types: Optional[Set[NodeType]] = None
    edge_types: Optional[Set[EdgeType]] = None
    include_connected: bool = False
    max_distance: int = 1
    graph_id: Optional[str] = None


class SubgraphExtractor:
    def __init__(self, traversal: Optional[TraversalEngine] = None):
        self.traversal = traversal or TraversalEngine()

    def extract_subgraph(self, graph: DependencyGraph, options: Optional[SubgraphOptions] = None, **overrides) -> DependencyGraph:
        opts = options or SubgraphOptions()
        if overrides:
            opts = opts.model_validate({**opts.model_dump(), **overrides})

        selected = self._seed(graph, opts)

        if opts.include_connected:
            expand = TraversalOptions(
                max_depth=opts.max_distance,
                include_start=False,
                edge_types=opts.edge_types,
                direction=TraversalDirection.BOTH,
            )
            connected: Set[str] = set()
            for node_id in selected:
                connected.update(self.traversal.traverse(graph, node_id, expand).node_ids())
            selected |= connected

        builder = GraphBuilder(
            graph_id=opts.graph_id or f"{graph.id}-sub",
            allow_duplicate_edges=True,
        )
        for node_id, node in graph.nodes.items():
            if node_id in selected:
                builder.add_node(node)

        for edge in graph.edges:
            if edge.source not in selected or edge.target not in selected:
                continue
            if opts.edge_types and edge.type not in opts.edge_types:
                continue
            builder.add_edge(edge)

        return builder.build()

    @staticmethod
    def _seed(graph: DependencyGraph, opts: SubgraphOptions) -> Set[str]:
        selected: Set[str] = set()
        for node_id in opts.node_ids or ():
            if node_id in graph.nodes:
                selected.add(node_id)
        if opts.node_types:
            selected.update(nid for nid, node in graph.nodes.items() if node.type in opts.node_types)
        return selected


def extract_subgraph(graph: DependencyGraph, options: Optional[SubgraphOptions] = None, **overrides) -> DependencyGraph:
    return SubgraphExtractor().extract_subgraph(graph, options, **overrides)
