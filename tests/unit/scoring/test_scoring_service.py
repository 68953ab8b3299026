"""
Unit tests for the edge ScoringService.
"""

import logging

import pytest

from iacgraph.core.evidence import EvidenceCategory, EvidenceType, ScoringRule, create_evidence
from iacgraph.core.types import EdgeMetadata, EdgeType, GraphEdge
from iacgraph.scoring.engine import ScoringConfig
from iacgraph.scoring.service import ScoringService


def _edge(edge_id, confidence=100, implicit=False):
    return GraphEdge(
        id=edge_id,
        source="aws_subnet.public",
        target="aws_vpc.main",
        type=EdgeType.REFERENCES,
        label="vpc_id",
        metadata=EdgeMetadata(confidence=confidence, implicit=implicit, attribute="id"),
    )


@pytest.fixture
def service():
    return ScoringService()


@pytest.fixture
def strong():
    return [create_evidence(EvidenceType.DEPENDS_ON_DIRECTIVE, 90, category=EvidenceCategory.EXPLICIT)]


@pytest.fixture
def weak():
    return [create_evidence(EvidenceType.NAMING_CONVENTION, 40)]


class TestCalculateConfidence:
    def test_default_rules_applied(self, service, strong):
        score = service.calculate_confidence(strong)

        # 90 + explicit bonus 10 + depends_on rule 4.8, clamped
        assert score.value == 100
        assert "Rule matched: Explicit depends_on" in score.positive_factors

    def test_rules_disabled(self, strong):
        score = ScoringService(enable_rules=False).calculate_confidence(strong)
        assert not any(f.startswith("Rule matched") for f in score.positive_factors)

    def test_custom_rules_override(self, service, weak):
        rule = ScoringRule(id="x", name="X", applies_to=[EvidenceType.NAMING_CONVENTION], base_score=20)
        score = service.calculate_confidence(weak, custom_rules=[rule])

        # 40 * 0.6 - 15 + 20
        assert score.value == 29
        assert score.positive_factors == ["Rule matched: X"]

    def test_depends_on_beats_heuristic_at_zero(self, service):
        depends_on = service.calculate_confidence([create_evidence(EvidenceType.DEPENDS_ON_DIRECTIVE, 0)])
        naming = service.calculate_confidence([create_evidence(EvidenceType.NAMING_CONVENTION, 0)])

        # syntax category, so only the depends_on rule lifts it off the floor
        assert depends_on.value == 5
        assert naming.value == 0

    def test_configured_rules_added(self, weak):
        rule = ScoringRule(id="x", name="X", applies_to=[EvidenceType.NAMING_CONVENTION], base_score=20)
        score = ScoringService(custom_rules=[rule]).calculate_confidence(weak)
        assert "Rule matched: X" in score.positive_factors
        assert "Rule matched: Naming Convention" in score.positive_factors


class TestScoreEdge:
    def test_sets_confidence_and_implicit(self, service, weak):
        scored = service.score_edge(_edge("e1"), weak)

        assert scored.confidence < 80
        assert scored.metadata.implicit is True
        # Everything but the metadata confidence fields is preserved
        assert scored.id == "e1"
        assert scored.label == "vpc_id"
        assert scored.metadata.attribute == "id"

    def test_high_confidence_is_explicit(self, service, strong):
        scored = service.score_edge(_edge("e1", confidence=30, implicit=True), strong)
        assert scored.confidence == 100
        assert scored.metadata.implicit is False

    def test_no_evidence_keeps_confidence(self, service):
        scored = service.score_edge(_edge("e1", confidence=65), [])
        assert scored.confidence == 65
        assert scored.metadata.implicit is True

    def test_score_edges(self, service, strong, weak):
        edges = [_edge("e1"), _edge("e2"), _edge("e3", confidence=90)]
        scored = service.score_edges(edges, {"e1": strong, "e2": weak})

        assert [e.id for e in scored] == ["e1", "e2", "e3"]
        assert scored[0].confidence == 100
        assert scored[1].confidence < 40
        assert scored[2].confidence == 90


class TestBatchScore:
    def test_filters_below_threshold(self, service, strong, weak, caplog):
        edges = [_edge("e1"), _edge("e2")]
        with caplog.at_level(logging.INFO, logger="iacgraph.scoring.service"):
            result = service.batch_score(edges, {"e1": strong, "e2": weak})

        assert [e.id for e in result.edges] == ["e1"]
        assert [f.edge_id for f in result.filtered_edges] == ["e2"]
        assert result.filtered_edges[0].reason.startswith("Below threshold")
        assert result.stats.total_edges == 2
        assert result.stats.edges_above_threshold == 1
        assert result.stats.edges_below_threshold == 1
        assert result.stats.distribution["certain"] == 1
        assert result.stats.distribution["uncertain"] == 1
        assert result.stats.rules_applied == 2
        assert "Scored 2 edges" in caplog.text

    def test_custom_threshold(self, weak):
        result = ScoringService(min_confidence=0).batch_score([_edge("e1")], {"e1": weak})
        assert len(result.edges) == 1
        assert result.filtered_edges == []

    def test_average_rounds_half_up(self, service):
        edges = [_edge("e1", confidence=100), _edge("e2", confidence=5)]
        result = service.batch_score(edges, {})
        assert result.stats.average_confidence == 53

    def test_empty_batch(self, service):
        result = service.batch_score([], {})
        assert result.stats.total_edges == 0
        assert result.stats.average_confidence == 0


class TestScoreRelationships:
    def test_scores_each_id(self, service, strong, weak):
        scores = service.score_relationships({"a->b": strong, "c->d": weak, "e->f": []})

        assert set(scores) == {"a->b", "c->d", "e->f"}
        assert scores["a->b"].value > scores["c->d"].value
        assert scores["e->f"].value == 0

    def test_uses_engine_config(self, weak):
        service = ScoringService(config=ScoringConfig(heuristic_weight=1.0), enable_rules=False)
        # 40 * 1.0 - 15
        assert service.score_relationships({"r": weak})["r"].value == 25
