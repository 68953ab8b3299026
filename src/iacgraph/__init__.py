"""
iacgraph - Dependency graphs for infrastructure-as-code.

Builds typed dependency graphs from Terraform, Terragrunt, Kubernetes and
Helm constructs and scores the relationships between them from evidence.

Key Components:
- core: Node, edge, evidence and score types
- graph: Builder, validator, cycle detection, traversal, subgraph, merge
- analysis: Impact (blast radius) analysis
- scoring: Rule engine and confidence scoring

Usage:
    from iacgraph import GraphService

    service = GraphService()
    graph = service.build_graph(nodes, edges)
    result = service.analyze_impact(graph, ["aws_vpc.main"])
"""

__version__ = "0.1.0"

from .core.evidence import ConfidenceLevel, ConfidenceScore, Evidence, EvidenceCategory, EvidenceType
from .core.types import DependencyGraph, EdgeType, GraphEdge, Node, NodeType
from .graph.builder import GraphBuilder
from .scoring.engine import ScoringEngine
from .scoring.service import ScoringService
from .service import GraphService, GraphServiceConfig

__all__ = [
    "__version__",
    "ConfidenceLevel",
    "ConfidenceScore",
    "DependencyGraph",
    "EdgeType",
    "Evidence",
    "EvidenceCategory",
    "EvidenceType",
    "GraphBuilder",
    "GraphEdge",
    "GraphService",
    "GraphServiceConfig",
    "Node",
    "NodeType",
    "ScoringEngine",
    "ScoringService",
]
