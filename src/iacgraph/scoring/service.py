"""
Edge scoring on top of the scoring engine.

Assigns confidence to candidate edges from their evidence and filters out
edges that fall below a minimum confidence.
"""

import logging
import time
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from ..config import IMPLICIT_CONFIDENCE_CEILING, MIN_EDGE_CONFIDENCE
from ..core.evidence import ConfidenceLevel, ConfidenceScore, Evidence, ScoringRule, round_half_up
from ..core.types import GraphEdge
from .engine import ScoringConfig, ScoringEngine
from .rules import DEFAULT_RULES

logger = logging.getLogger(__name__)


class FilteredEdge(BaseModel):
    edge_id: str
    original_confidence: int
    reason: str


class BatchScoringStats(BaseModel):
    total_edges: int = 0
    edges_above_threshold: int = 0
    edges_below_threshold: int = 0
    average_confidence: int = 0
    distribution: Dict[str, int] = Field(
        default_factory=lambda: {level.value: 0 for level in ConfidenceLevel}
    )
    rules_applied: int = 0
    scoring_time_ms: float = 0.0


class BatchScoringResult(BaseModel):
    edges: List[GraphEdge] = Field(default_factory=list)
    filtered_edges: List[FilteredEdge] = Field(default_factory=list)
    stats: BatchScoringStats = Field(default_factory=BatchScoringStats)


class ScoringService:
    """
    Scores graph edges from the evidence collected for them.

    Args:
        config: Engine configuration.
        min_confidence: Edges scored below this are filtered by ``batch_score``.
        custom_rules: Rules applied in addition to ``DEFAULT_RULES``.
        enable_rules: When False, no rules are applied at all.
    """

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        min_confidence: int = MIN_EDGE_CONFIDENCE,
        custom_rules: Optional[Sequence[ScoringRule]] = None,
        enable_rules: bool = True,
    ):
        self.engine = ScoringEngine(config)
        self.min_confidence = min_confidence
        self.custom_rules = list(custom_rules or [])
        self.enable_rules = enable_rules

    @property
    def rules(self) -> List[ScoringRule]:
        if not self.enable_rules:
            return []
        return [*DEFAULT_RULES, *self.custom_rules]

    def calculate_confidence(
        self,
        evidence: Sequence[Evidence],
        custom_rules: Optional[Sequence[ScoringRule]] = None,
    ) -> ConfidenceScore:
        rules = self.rules if custom_rules is None else list(custom_rules)
        return self.engine.calculate(evidence, custom_rules=rules)

    def score_edge(self, edge: GraphEdge, evidence: Sequence[Evidence]) -> GraphEdge:
        """Return a copy of ``edge`` with confidence and implicit set from its evidence."""
        if evidence:
            confidence = self.calculate_confidence(evidence).value
        else:
            confidence = edge.confidence
        return edge.with_confidence(confidence, implicit=confidence < IMPLICIT_CONFIDENCE_CEILING)

    def score_edges(
        self,
        edges: Sequence[GraphEdge],
        evidence_by_edge: Mapping[str, Sequence[Evidence]],
    ) -> List[GraphEdge]:
        return [self.score_edge(edge, evidence_by_edge.get(edge.id, ())) for edge in edges]

    def batch_score(
        self,
        edges: Sequence[GraphEdge],
        evidence_by_edge: Mapping[str, Sequence[Evidence]],
    ) -> BatchScoringResult:
        start = time.perf_counter()
        stats = BatchScoringStats(total_edges=len(edges))
        kept: List[GraphEdge] = []
        filtered: List[FilteredEdge] = []
        total_confidence = 0

        for edge in edges:
            evidence = evidence_by_edge.get(edge.id, ())
            if evidence and self.enable_rules:
                results = self.engine.rule_engine.evaluate(evidence, self.rules)
                stats.rules_applied += sum(1 for r in results if r.matched)

            scored = self.score_edge(edge, evidence)
            confidence = scored.confidence
            total_confidence += confidence
            stats.distribution[self.engine.get_level(confidence).value] += 1

            if confidence >= self.min_confidence:
                kept.append(scored)
            else:
                filtered.append(FilteredEdge(
                    edge_id=edge.id,
                    original_confidence=confidence,
                    reason=f"Below threshold ({confidence} < {self.min_confidence})",
                ))

        stats.edges_above_threshold = len(kept)
        stats.edges_below_threshold = len(filtered)
        stats.average_confidence = round_half_up(total_confidence / len(edges)) if edges else 0
        stats.scoring_time_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "Scored %d edges: %d kept, %d filtered (avg confidence %d)",
            stats.total_edges, stats.edges_above_threshold,
            stats.edges_below_threshold, stats.average_confidence,
        )
        return BatchScoringResult(edges=kept, filtered_edges=filtered, stats=stats)

    def score_relationships(self, evidence_by_id: Mapping[str, Sequence[Evidence]]) -> Dict[str, ConfidenceScore]:
        """Score each relationship id independently."""
        return {rel_id: self.calculate_confidence(evidence) for rel_id, evidence in evidence_by_id.items()}
