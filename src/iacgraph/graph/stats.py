"""Summary statistics for a graph snapshot."""

from collections import Counter
from typing import Dict

from pydantic import BaseModel, Field

from ..core.types import DependencyGraph


class GraphStats(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    nodes_by_type: Dict[str, int] = Field(default_factory=dict)
    edges_by_type: Dict[str, int] = Field(default_factory=dict)
    avg_edges_per_node: float = 0.0
    max_in_degree: int = 0
    max_out_degree: int = 0
    orphan_nodes: int = 0
    density: float = 0.0


def get_graph_stats(graph: DependencyGraph) -> GraphStats:
    in_degree: Counter = Counter()
    out_degree: Counter = Counter()
    for edge in graph.edges:
        out_degree[edge.source] += 1
        in_degree[edge.target] += 1

    n = graph.node_count
    max_edges = n * (n - 1)
    return GraphStats(
        node_count=n,
        edge_count=graph.edge_count,
        nodes_by_type=dict(Counter(node.type.value for node in graph.nodes.values())),
        edges_by_type=dict(Counter(edge.type.value for edge in graph.edges)),
        avg_edges_per_node=graph.edge_count / n if n else 0.0,
        max_in_degree=max((in_degree[nid] for nid in graph.nodes), default=0),
        max_out_degree=max((out_degree[nid] for nid in graph.nodes), default=0),
        orphan_nodes=sum(1 for nid in graph.nodes if not in_degree[nid] and not out_degree[nid]),
        density=graph.edge_count / max_edges if max_edges else 0.0,
    )
