"""
Unit tests for impact (blast radius) analysis.
"""

import pytest

from iacgraph.analysis.impact import ImpactAnalyzer, RiskLevel, RiskThresholds, analyze_impact
from iacgraph.core.types import EdgeType, K8sServiceNode, Node, NodeType
from iacgraph.graph.builder import GraphBuilder


def _star(n):
    """A hub with ``n`` dependents."""
    builder = GraphBuilder()
    builder.add_node(Node(id="hub", type=NodeType.TERRAFORM_RESOURCE))
    for i in range(n):
        builder.add_node(Node(id=f"dep{i}", type=NodeType.TERRAFORM_RESOURCE))
        builder.add_edge_by_ids(f"dep{i}", "hub", EdgeType.REFERENCES)
    return builder.build()


class TestAnalyzeImpact:
    def test_vpc_direct_and_transitive(self, vpc_graph):
        result = analyze_impact(vpc_graph, ["aws_vpc.main"])

        assert [n.id for n in result.direct_impact] == ["aws_subnet.public"]
        assert [n.id for n in result.transitive_impact] == ["aws_instance.web"]
        assert result.summary.total_impacted == 2
        assert sum(result.summary.impact_by_type.values()) == result.summary.total_impacted
        assert result.summary.impact_by_depth == {1: 1, 2: 1}
        assert result.summary.risk_level == RiskLevel.MEDIUM

    def test_changed_nodes_excluded(self, vpc_graph):
        result = analyze_impact(vpc_graph, ["aws_vpc.main", "aws_subnet.public"])

        assert result.impacted_ids() == ["aws_instance.web"]
        # Instance is one hop from the subnet, so it is direct
        assert [n.id for n in result.direct_impact] == ["aws_instance.web"]
        assert result.transitive_impact == []

    def test_leaf_change_has_no_impact(self, vpc_graph):
        result = analyze_impact(vpc_graph, ["aws_instance.web"])
        assert result.summary.total_impacted == 0
        assert result.summary.risk_level == RiskLevel.LOW

    def test_missing_node_is_empty(self, vpc_graph):
        result = analyze_impact(vpc_graph, ["ghost"])
        assert result.impacted_ids() == []
        assert result.changed_node_ids == ["ghost"]

    def test_cycle_does_not_impact_changed_node(self, sg_cycle_graph):
        result = analyze_impact(sg_cycle_graph, ["aws_security_group.a"])
        assert set(result.impacted_ids()) == {"aws_security_group.b", "aws_security_group.c"}

    def test_max_depth(self, vpc_graph):
        result = ImpactAnalyzer().analyze_impact(vpc_graph, ["aws_vpc.main"], max_depth=1)
        assert result.impacted_ids() == ["aws_subnet.public"]

    @pytest.mark.parametrize("count,level", [
        (0, RiskLevel.LOW),
        (1, RiskLevel.MEDIUM),
        (5, RiskLevel.MEDIUM),
        (6, RiskLevel.HIGH),
        (20, RiskLevel.HIGH),
        (21, RiskLevel.CRITICAL),
    ])
    def test_risk_thresholds(self, count, level):
        result = analyze_impact(_star(count), ["hub"])
        assert result.summary.total_impacted == count
        assert result.summary.risk_level == level

    def test_custom_thresholds(self):
        strict = RiskThresholds(medium=1, high=2, critical=3)
        result = analyze_impact(_star(3), ["hub"], thresholds=strict)
        assert result.summary.risk_level == RiskLevel.CRITICAL

    def test_breakdown_by_ecosystem(self):
        builder = GraphBuilder()
        builder.add_node(Node(id="hub", type=NodeType.TERRAFORM_OUTPUT))
        builder.add_node(K8sServiceNode(id="svc", namespace="default"))
        builder.add_node(Node(id="release", type=NodeType.HELM_RELEASE))
        builder.add_edge_by_ids("svc", "hub", EdgeType.REFERENCES)
        builder.add_edge_by_ids("release", "svc", EdgeType.SERVICE_TARGET)

        breakdown = analyze_impact(builder.build(), ["hub"]).summary.breakdown
        assert breakdown["kubernetes"] == ["svc"]
        assert breakdown["helm"] == ["release"]
        assert breakdown["terraform"] == []

    def test_impact_paths(self, vpc_graph):
        result = analyze_impact(vpc_graph, ["aws_vpc.main"])
        ends = {p.end_node_id: p.length for p in result.impact_paths}
        assert ends == {"aws_subnet.public": 1, "aws_instance.web": 2}
