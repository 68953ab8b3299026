"""
Impact (blast radius) analysis.

Calculates which nodes are affected when a set of nodes changes. Impact flows
downstream: a change to a node affects everything that depends on it.
"""

import logging
from enum import StrEnum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from ..config import DEFAULT_MAX_DEPTH, RISK_CRITICAL_MIN, RISK_HIGH_MIN, RISK_MEDIUM_MIN
from ..core.types import (
    DependencyGraph,
    Node,
    is_helm_node,
    is_k8s_node,
    is_terraform_node,
    is_terragrunt_node,
)
from ..graph.traversal import TraversalEngine, TraversalOptions, TraversalPath

logger = logging.getLogger(__name__)


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RiskThresholds(BaseModel):
    """Minimum impacted-node count for each risk level."""
    medium: int = RISK_MEDIUM_MIN
    high: int = RISK_HIGH_MIN
    critical: int = RISK_CRITICAL_MIN

    def classify(self, total_impacted: int) -> RiskLevel:
        if total_impacted >= self.critical:
            return RiskLevel.CRITICAL
        if total_impacted >= self.high:
            return RiskLevel.HIGH
        if total_impacted >= self.medium:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


class ImpactSummary(BaseModel):
    total_impacted: int = 0
    impact_by_type: Dict[str, int] = Field(default_factory=dict)
    impact_by_depth: Dict[int, int] = Field(default_factory=dict)
    breakdown: Dict[str, List[str]] = Field(default_factory=dict)
    risk_level: RiskLevel = RiskLevel.LOW


class ImpactAnalysisResult(BaseModel):
    changed_node_ids: List[str] = Field(default_factory=list)
    direct_impact: List[Node] = Field(default_factory=list)
    transitive_impact: List[Node] = Field(default_factory=list)
    impact_paths: List[TraversalPath] = Field(default_factory=list)
    summary: ImpactSummary = Field(default_factory=ImpactSummary)

    def impacted_ids(self) -> List[str]:
        return [n.id for n in self.direct_impact] + [n.id for n in self.transitive_impact]


class ImpactAnalyzer:
    """
    Analyzes the downstream impact of changing specific nodes.

    Direct impact is everything one downstream hop from any changed node;
    transitive impact is everything further away. Each impacted node is
    classified by its shortest distance to any changed node, so the two sets
    are disjoint and their union is the total.
    """

    def __init__(
        self,
        traversal: Optional[TraversalEngine] = None,
        thresholds: Optional[RiskThresholds] = None,
        max_depth: Optional[int] = DEFAULT_MAX_DEPTH,
    ):
        self.traversal = traversal or TraversalEngine()
        self.thresholds = thresholds or RiskThresholds()
        self.max_depth = max_depth

    def analyze_impact(
        self,
        graph: DependencyGraph,
        changed_node_ids: Iterable[str],
        max_depth: Optional[int] = None,
        thresholds: Optional[RiskThresholds] = None,
    ) -> ImpactAnalysisResult:
        changed = list(dict.fromkeys(changed_node_ids))
        changed_set = set(changed)
        depth_limit = max_depth if max_depth is not None else self.max_depth
        options = TraversalOptions(max_depth=depth_limit, include_start=False)

        distance: Dict[str, int] = {}
        paths: List[TraversalPath] = []
        for root_id in changed:
            if not graph.has_node(root_id):
                logger.debug("Changed node not in graph: %s", root_id)
                continue
            downstream = self.traversal.get_downstream(graph, root_id, options)
            for path in downstream.paths:
                if path.end_node_id in changed_set:
                    continue
                paths.append(path)
                best = distance.get(path.end_node_id)
                if best is None or path.length < best:
                    distance[path.end_node_id] = path.length

        direct = [graph.nodes[nid] for nid, d in distance.items() if d == 1]
        transitive = [graph.nodes[nid] for nid, d in distance.items() if d > 1]

        impact_by_type: Dict[str, int] = {}
        impact_by_depth: Dict[int, int] = {}
        for node_id, depth in distance.items():
            node_type = graph.nodes[node_id].type.value
            impact_by_type[node_type] = impact_by_type.get(node_type, 0) + 1
            impact_by_depth[depth] = impact_by_depth.get(depth, 0) + 1

        total = len(distance)
        risk = (thresholds or self.thresholds).classify(total)
        logger.debug("Impact of %d changed node(s): %d impacted, risk=%s", len(changed), total, risk.value)

        return ImpactAnalysisResult(
            changed_node_ids=changed,
            direct_impact=direct,
            transitive_impact=transitive,
            impact_paths=paths,
            summary=ImpactSummary(
                total_impacted=total,
                impact_by_type=impact_by_type,
                impact_by_depth=impact_by_depth,
                breakdown=self._categorize(direct + transitive),
                risk_level=risk,
            ),
        )

    @staticmethod
    def _categorize(nodes: List[Node]) -> Dict[str, List[str]]:
        """Group impacted node ids by ecosystem."""
        breakdown: Dict[str, List[str]] = {
            "terraform": [],
            "terragrunt": [],
            "kubernetes": [],
            "helm": [],
            "other": [],
        }
        for node in nodes:
            if is_terraform_node(node):
                breakdown["terraform"].append(node.id)
            elif is_terragrunt_node(node):
                breakdown["terragrunt"].append(node.id)
            elif is_k8s_node(node):
                breakdown["kubernetes"].append(node.id)
            elif is_helm_node(node):
                breakdown["helm"].append(node.id)
            else:
                breakdown["other"].append(node.id)
        return breakdown


def analyze_impact(
    graph: DependencyGraph,
    changed_node_ids: Iterable[str],
    max_depth: Optional[int] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> ImpactAnalysisResult:
    return ImpactAnalyzer().analyze_impact(graph, changed_node_ids, max_depth, thresholds)
