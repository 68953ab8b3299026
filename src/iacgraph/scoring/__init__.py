"""
Evidence-based confidence scoring.
"""

from .engine import DEFAULT_SCORING_CONFIG, ScoringConfig, ScoringEngine, calculate_confidence, normalize_score
from .rules import DEFAULT_RULES, RuleEngine, RuleEvaluationResult, RuleValidationResult
from .service import BatchScoringResult, FilteredEdge, ScoringService

__all__ = [
    "DEFAULT_SCORING_CONFIG", "ScoringConfig", "ScoringEngine", "calculate_confidence", "normalize_score",
    "DEFAULT_RULES", "RuleEngine", "RuleEvaluationResult", "RuleValidationResult",
    "BatchScoringResult", "FilteredEdge", "ScoringService",
]
