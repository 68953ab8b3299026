"""
Combining independently built graphs.

Edges are concatenated without de-duplication, so the merged edge count is
the sum of the inputs. Node id collisions are settled by a strategy.
"""

import logging
from enum import StrEnum
from typing import Optional, Sequence

from pydantic import BaseModel

from ..core.exceptions import NodeConflictError
from ..core.types import DependencyGraph, GraphEdge, Node
from .builder import GraphBuilder, _new_graph_id

logger = logging.getLogger(__name__)


class NodeConflictStrategy(StrEnum):
    KEEP_FIRST = "keep-first"
    KEEP_LAST = "keep-last"
    MERGE = "merge"
    ERROR = "error"


class MergeOptions(BaseModel):
    node_conflict_strategy: NodeConflictStrategy = NodeConflictStrategy.KEEP_LAST
    # When non-empty, ids become "{prefix}{graph_index}_{id}".
    node_id_prefix: Optional[str] = None
    # Defaults to node_id_prefix.
    edge_id_prefix: Optional[str] = None
    graph_id: Optional[str] = None


class GraphMerger:
    """Merges multiple dependency graphs into one."""

    def merge(self, graphs: Sequence[DependencyGraph], options: Optional[MergeOptions] = None, **overrides) -> DependencyGraph:
        opts = options or MergeOptions()
        if overrides:
            opts = opts.model_validate({**opts.model_dump(), **overrides})

        builder = GraphBuilder(
            graph_id=opts.graph_id or _new_graph_id("merged"),
            validate_on_add=False,
            allow_duplicate_edges=True,
        )

        for index, graph in enumerate(graphs):
            node_prefix = self._prefix(opts.node_id_prefix, index)
            edge_prefix = self._prefix(
                opts.edge_id_prefix if opts.edge_id_prefix is not None else opts.node_id_prefix,
                index,
            )

            for node in graph.nodes.values():
                incoming = node.model_copy(update={"id": node_prefix + node.id}) if node_prefix else node
                self._merge_node(builder, incoming, opts.node_conflict_strategy)

            for edge in graph.edges:
                builder.add_edge(self._rename_edge(edge, node_prefix, edge_prefix))

        merged = builder.build()
        logger.debug(
            "Merged %d graph(s): %d nodes, %d edges",
            len(graphs), merged.node_count, merged.edge_count,
        )
        return merged

    @staticmethod
    def _merge_node(builder: GraphBuilder, node: Node, strategy: NodeConflictStrategy) -> None:
        existing = builder.get_node(node.id)
        if existing is None:
            builder.add_node(node)
            return

        if strategy == NodeConflictStrategy.ERROR:
            raise NodeConflictError(node.id)
        if strategy == NodeConflictStrategy.KEEP_FIRST:
            logger.debug("Node conflict on %s: keeping first", node.id)
            return
        if strategy == NodeConflictStrategy.KEEP_LAST:
            logger.debug("Node conflict on %s: keeping last", node.id)
            builder.add_node(node)
            return

        logger.debug("Node conflict on %s: merging metadata", node.id)
        builder.add_node(node.model_copy(update={"metadata": {**existing.metadata, **node.metadata}}))

    @staticmethod
    def _prefix(prefix: Optional[str], index: int) -> str:
        return f"{prefix}{index}_" if prefix else ""

    @staticmethod
    def _rename_edge(edge: GraphEdge, node_prefix: str, edge_prefix: str) -> GraphEdge:
        if not node_prefix and not edge_prefix:
            return edge
        return edge.model_copy(update={
            "id": edge_prefix + edge.id,
            "source": node_prefix + edge.source,
            "target": node_prefix + edge.target,
        })


def merge_graphs(graphs: Sequence[DependencyGraph], options: Optional[MergeOptions] = None, **overrides) -> DependencyGraph:
    return GraphMerger().merge(graphs, options, **overrides)
