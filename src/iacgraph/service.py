"""
Graph service facade.

Enforces size limits on candidate input, builds a validated graph and exposes
the graph algorithms behind one object.
"""

import logging
from collections import Counter
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel

from .analysis.impact import ImpactAnalysisResult, ImpactAnalyzer, RiskThresholds
from .config import MAX_EDGES_PER_NODE, MAX_NODES
from .core.exceptions import GraphLimitError
from .core.types import DependencyGraph, GraphEdge, Node
from .graph.builder import GraphBuilder
from .graph.cycles import CycleDetectionResult
from .graph.merger import GraphMerger, MergeOptions
from .graph.stats import GraphStats, get_graph_stats
from .graph.subgraph import SubgraphExtractor, SubgraphOptions
from .graph.traversal import TraversalEngine, TraversalOptions, TraversalPath, TraversalResult
from .graph.validator import GraphValidator, ValidationResult

logger = logging.getLogger(__name__)


class GraphServiceConfig(BaseModel):
    validate_on_build: bool = True
    max_nodes: int = MAX_NODES
    max_edges_per_node: int = MAX_EDGES_PER_NODE


class GraphService:
    """Builds dependency graphs from parser output and answers queries on them."""

    def __init__(self, config: Optional[GraphServiceConfig] = None):
        self.config = config or GraphServiceConfig()
        self.validator = GraphValidator()
        self.cycle_detector = self.validator.cycle_detector
        self.traversal = TraversalEngine()
        self.impact_analyzer = ImpactAnalyzer(self.traversal)
        self.subgraph_extractor = SubgraphExtractor(self.traversal)
        self.merger = GraphMerger()

    def build_graph(
        self,
        nodes: Sequence[Node],
        edges: Sequence[GraphEdge],
        graph_id: Optional[str] = None,
    ) -> DependencyGraph:
        """
        Build a graph from candidate nodes and edges.

        Raises:
            GraphLimitError: If the input exceeds ``max_nodes`` or any node has
                more than ``max_edges_per_node`` outgoing edges.
        """
        self._check_limits(nodes, edges)
        logger.info("Building graph from %d nodes and %d edges", len(nodes), len(edges))

        builder = GraphBuilder(graph_id=graph_id)
        builder.add_nodes(nodes)

        dropped = 0
        for edge in edges:
            if not builder.has_node(edge.source) or not builder.has_node(edge.target):
                logger.warning(
                    "Dropping edge %s: missing %s node",
                    edge.id, "source" if not builder.has_node(edge.source) else "target",
                )
                dropped += 1
                continue
            builder.add_edge(edge)

        graph = builder.build()
        logger.info(
            "Built graph %s: %d nodes, %d edges (%d dropped) in %.1fms",
            graph.id, graph.node_count, graph.edge_count, dropped, graph.metadata.build_time_ms,
        )

        if self.config.validate_on_build:
            self._log_validation(self.validator.validate(graph))
        return graph

    def validate(self, graph: DependencyGraph) -> ValidationResult:
        return self.validator.validate(graph)

    def detect_cycles(self, graph: DependencyGraph) -> CycleDetectionResult:
        return self.cycle_detector.detect_cycles(graph)

    def get_downstream(self, graph: DependencyGraph, node_id: str, options: Optional[TraversalOptions] = None, **overrides) -> TraversalResult:
        return self.traversal.get_downstream(graph, node_id, options, **overrides)

    def get_upstream(self, graph: DependencyGraph, node_id: str, options: Optional[TraversalOptions] = None, **overrides) -> TraversalResult:
        return self.traversal.get_upstream(graph, node_id, options, **overrides)

    def get_shortest_path(self, graph: DependencyGraph, source_id: str, target_id: str) -> Optional[TraversalPath]:
        return self.traversal.get_shortest_path(graph, source_id, target_id)

    def analyze_impact(
        self,
        graph: DependencyGraph,
        changed_node_ids: Iterable[str],
        max_depth: Optional[int] = None,
        thresholds: Optional[RiskThresholds] = None,
    ) -> ImpactAnalysisResult:
        return self.impact_analyzer.analyze_impact(graph, changed_node_ids, max_depth, thresholds)

    def extract_subgraph(self, graph: DependencyGraph, options: Optional[SubgraphOptions] = None, **overrides) -> DependencyGraph:
        return self.subgraph_extractor.extract_subgraph(graph, options, **overrides)

    def merge_graphs(self, graphs: Sequence[DependencyGraph], options: Optional[MergeOptions] = None, **overrides) -> DependencyGraph:
        return self.merger.merge(graphs, options, **overrides)

    def get_stats(self, graph: DependencyGraph) -> GraphStats:
        return get_graph_stats(graph)

    def _check_limits(self, nodes: Sequence[Node], edges: Sequence[GraphEdge]) -> None:
        if len(nodes) > self.config.max_nodes:
            raise GraphLimitError("max_nodes", len(nodes), self.config.max_nodes)

        per_source = Counter(edge.source for edge in edges)
        for source, count in per_source.items():
            if count > self.config.max_edges_per_node:
                raise GraphLimitError("max_edges_per_node", count, self.config.max_edges_per_node, subject=source)

    @staticmethod
    def _log_validation(result: ValidationResult) -> None:
        if not result.is_valid:
            logger.warning(
                "Graph validation failed: %s",
                "; ".join(issue.message for issue in result.errors),
            )
        for issue in result.warnings:
            logger.debug("Validation warning [%s]: %s", issue.code, issue.message)


def create_graph_service(config: Optional[GraphServiceConfig] = None) -> GraphService:
    return GraphService(config)
