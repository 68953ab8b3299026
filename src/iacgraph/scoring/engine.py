"""
Evidence-based confidence scoring.

Folds a list of evidence items into a ConfidenceScore:

    value = clamp(base * multiplier + explicit + pattern - penalty + rules)

where ``base`` is the category-weighted mean confidence, ``multiplier`` grows
with evidence count under diminishing returns, and ``rules`` is the sum of
custom rule contributions. Scoring never raises.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from ..core.evidence import (
    ConfidenceBreakdown,
    ConfidenceLevel,
    ConfidenceScore,
    Evidence,
    EvidenceCategory,
    ScoringRule,
    get_confidence_level,
    round_half_up,
)
from .rules import RuleEngine, RuleEvaluationResult

logger = logging.getLogger(__name__)


class ScoringConfig(BaseModel):
    min_score: float = 0
    max_score: float = 100

    # Per-category weights applied to each item's confidence
    explicit_weight: float = 1.0
    semantic_weight: float = 0.9
    syntax_weight: float = 0.9
    structural_weight: float = 0.8
    heuristic_weight: float = 0.6

    # Evidence multiplier: 1 + sum(decay_rate**i * multiplier_step), i = 1..n-1
    enable_diminishing_returns: bool = True
    decay_rate: float = 0.85
    multiplier_step: float = 0.1
    max_multiplier: float = 1.5

    explicit_bonus: float = 10
    # Heuristic-only penalty, by mean confidence below/at-or-above 50
    heuristic_penalty_low: float = 15
    heuristic_penalty_high: float = 5
    # Granted at >= 3 distinct categories and >= 5 distinct types
    pattern_category_bonus: float = 10
    pattern_type_bonus: float = 5

    def category_weight(self, category: EvidenceCategory) -> float:
        weights = {
            EvidenceCategory.EXPLICIT: self.explicit_weight,
            EvidenceCategory.SEMANTIC: self.semantic_weight,
            EvidenceCategory.SYNTAX: self.syntax_weight,
            EvidenceCategory.STRUCTURAL: self.structural_weight,
            EvidenceCategory.HEURISTIC: self.heuristic_weight,
        }
        return weights.get(category, 1.0)


DEFAULT_SCORING_CONFIG = ScoringConfig()


def normalize_score(value: float, lo: float = 0, hi: float = 100) -> float:
    return max(lo, min(hi, value))


def _fmt(value: float) -> str:
    return f"{value:g}"


class ScoringEngine:
    """
    Computes, validates and merges confidence scores.

    Only the ``custom_rules`` passed to ``calculate`` are evaluated; callers
    wanting the built-in rule set pass ``DEFAULT_RULES`` explicitly (see
    ``ScoringService``).
    """

    def __init__(self, config: Optional[ScoringConfig] = None, rule_engine: Optional[RuleEngine] = None):
        self.config = config or DEFAULT_SCORING_CONFIG
        self.rule_engine = rule_engine or RuleEngine()

    def calculate(
        self,
        evidence: Sequence[Evidence],
        config: Union[ScoringConfig, Dict[str, Any], None] = None,
        custom_rules: Optional[Sequence[ScoringRule]] = None,
    ) -> ConfidenceScore:
        if not evidence:
            return self._empty_score()

        cfg = self._resolve_config(config)

        base_score = self._base_score(evidence, cfg)
        multiplier = self._evidence_multiplier(len(evidence), cfg)
        explicit_bonus = cfg.explicit_bonus if any(
            e.category == EvidenceCategory.EXPLICIT for e in evidence
        ) else 0.0
        heuristic_penalty = self._heuristic_penalty(evidence, cfg)
        pattern_bonus = self._pattern_bonus(evidence, cfg)

        rule_results = self.rule_engine.evaluate(evidence, custom_rules or [])
        rule_total = sum(r.score_contribution for r in rule_results if r.matched)

        raw = base_score * multiplier + explicit_bonus + pattern_bonus - heuristic_penalty + rule_total
        value = round_half_up(normalize_score(raw, cfg.min_score, cfg.max_score))

        breakdown = ConfidenceBreakdown(
            base_score=base_score,
            evidence_multiplier=multiplier,
            explicit_bonus=explicit_bonus,
            heuristic_penalty=heuristic_penalty,
            pattern_bonus=pattern_bonus,
        )
        positive, negative = self._collect_factors(evidence, rule_results, breakdown)

        return ConfidenceScore(
            value=value,
            breakdown=breakdown,
            level=self.get_level(value),
            positive_factors=positive,
            negative_factors=negative,
        )

    def get_level(self, value: float) -> ConfidenceLevel:
        return get_confidence_level(value)

    def validate(self, score: ConfidenceScore) -> bool:
        return (
            self.config.min_score <= score.value <= self.config.max_score
            and score.level == self.get_level(score.value)
        )

    def merge(self, scores: Sequence[ConfidenceScore]) -> ConfidenceScore:
        """
        Combine scores for the same relationship.

        The merged value is the mean of the input values weighted by
        themselves, so confident scores dominate. Factor lists are unioned in
        first-seen order and breakdown fields are summed.
        """
        if not scores:
            return self._empty_score()
        if len(scores) == 1:
            return scores[0]

        total_weight = sum(s.value for s in scores)
        value = round_half_up(sum(s.value * s.value for s in scores) / total_weight) if total_weight else 0

        breakdown = ConfidenceBreakdown(
            base_score=sum(s.breakdown.base_score for s in scores),
            evidence_multiplier=sum(s.breakdown.evidence_multiplier for s in scores),
            explicit_bonus=sum(s.breakdown.explicit_bonus for s in scores),
            heuristic_penalty=sum(s.breakdown.heuristic_penalty for s in scores),
            pattern_bonus=sum(s.breakdown.pattern_bonus for s in scores),
        )
        return ConfidenceScore(
            value=value,
            breakdown=breakdown,
            level=self.get_level(value),
            positive_factors=list(dict.fromkeys(f for s in scores for f in s.positive_factors)),
            negative_factors=list(dict.fromkeys(f for s in scores for f in s.negative_factors)),
        )

    def _resolve_config(self, config: Union[ScoringConfig, Dict[str, Any], None]) -> ScoringConfig:
        if config is None:
            return self.config
        if isinstance(config, ScoringConfig):
            return config
        return ScoringConfig.model_validate({**self.config.model_dump(), **config})

    @staticmethod
    def _base_score(evidence: Sequence[Evidence], cfg: ScoringConfig) -> float:
        return sum(e.confidence * cfg.category_weight(e.category) for e in evidence) / len(evidence)

    @staticmethod
    def _evidence_multiplier(count: int, cfg: ScoringConfig) -> float:
        if not cfg.enable_diminishing_returns:
            return 1.0
        multiplier = 1.0 + sum(cfg.decay_rate ** i * cfg.multiplier_step for i in range(1, count))
        return min(cfg.max_multiplier, multiplier)

    @staticmethod
    def _heuristic_penalty(evidence: Sequence[Evidence], cfg: ScoringConfig) -> float:
        if not all(e.category == EvidenceCategory.HEURISTIC for e in evidence):
            return 0.0
        mean = sum(e.confidence for e in evidence) / len(evidence)
        return cfg.heuristic_penalty_low if mean < 50 else cfg.heuristic_penalty_high

    @staticmethod
    def _pattern_bonus(evidence: Sequence[Evidence], cfg: ScoringConfig) -> float:
        bonus = 0.0
        if len({e.category for e in evidence}) >= 3:
            bonus += cfg.pattern_category_bonus
        if len({e.type for e in evidence}) >= 5:
            bonus += cfg.pattern_type_bonus
        return bonus

    @staticmethod
    def _collect_factors(
        evidence: Sequence[Evidence],
        rule_results: List[RuleEvaluationResult],
        breakdown: ConfidenceBreakdown,
    ) -> Tuple[List[str], List[str]]:
        positive: List[str] = []
        negative: List[str] = []

        if any(e.category == EvidenceCategory.EXPLICIT for e in evidence):
            positive.append("Explicit dependency declaration found")
        if len(evidence) > 1:
            positive.append(f"Multiple evidence sources ({len(evidence)})")
        if len({e.category for e in evidence}) >= 2:
            positive.append("Evidence from multiple categories")

        if breakdown.explicit_bonus > 0:
            positive.append(f"Explicit evidence bonus (+{_fmt(breakdown.explicit_bonus)})")
        if breakdown.pattern_bonus > 0:
            positive.append(f"Pattern consistency bonus across multiple categories (+{_fmt(breakdown.pattern_bonus)})")
        if breakdown.heuristic_penalty > 0:
            negative.append(f"Heuristic-only evidence penalty (-{_fmt(breakdown.heuristic_penalty)})")
        if all(e.confidence < 40 for e in evidence):
            negative.append("All evidence has low confidence")

        for result in rule_results:
            if not result.matched:
                continue
            if result.score_contribution > 0:
                positive.append(f"Rule matched: {result.rule.name}")
            elif result.score_contribution < 0:
                negative.append(f"Rule penalty: {result.rule.name}")

        return positive, negative

    @staticmethod
    def _empty_score() -> ConfidenceScore:
        return ConfidenceScore(value=0, negative_factors=["No evidence provided"])


def calculate_confidence(
    evidence: Sequence[Evidence],
    config: Union[ScoringConfig, Dict[str, Any], None] = None,
    custom_rules: Optional[Sequence[ScoringRule]] = None,
) -> ConfidenceScore:
    return ScoringEngine().calculate(evidence, config, custom_rules)
