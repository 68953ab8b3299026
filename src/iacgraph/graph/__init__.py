"""
Graph construction and algorithms.

- builder: incremental, validated construction
- validator / cycles: structural checks and cycle enumeration
- traversal: downstream, upstream and shortest-path queries
- subgraph / merger: deriving and combining graphs
"""

from .builder import GraphBuilder, GraphBuilderOptions, create_empty_graph, create_graph_builder
from .cycles import CycleDetector, detect_cycles
from .merger import GraphMerger, MergeOptions, NodeConflictStrategy, merge_graphs
from .stats import GraphStats, get_graph_stats
from .subgraph import SubgraphExtractor, SubgraphOptions, extract_subgraph
from .traversal import TraversalEngine, TraversalOptions, get_downstream, get_shortest_path, get_upstream
from .validator import GraphValidator, ValidationResult, validate_graph

__all__ = [
    "GraphBuilder", "GraphBuilderOptions", "create_empty_graph", "create_graph_builder",
    "CycleDetector", "detect_cycles",
    "GraphMerger", "MergeOptions", "NodeConflictStrategy", "merge_graphs",
    "GraphStats", "get_graph_stats",
    "SubgraphExtractor", "SubgraphOptions", "extract_subgraph",
    "TraversalEngine", "TraversalOptions", "get_downstream", "get_shortest_path", "get_upstream",
    "GraphValidator", "ValidationResult", "validate_graph",
]
