"""
Evidence and confidence value types.

Evidence items are single observations supporting a relationship between two
nodes. The scoring engine folds a list of them into a ConfidenceScore whose
level is always derived from its numeric value.
"""

import math
import uuid
from collections import Counter
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EvidenceType(StrEnum):
    """Signals that suggest two constructs are related."""
    EXPLICIT_REFERENCE = "explicit_reference"
    DEPENDS_ON_DIRECTIVE = "depends_on_directive"
    MODULE_SOURCE = "module_source"
    PROVIDER_ALIAS = "provider_alias"
    VARIABLE_DEFAULT = "variable_default"
    INTERPOLATION = "interpolation"
    FUNCTION_CALL = "function_call"
    FOR_EXPRESSION = "for_expression"
    CONDITIONAL = "conditional"
    SPLAT_OPERATION = "splat_operation"
    BLOCK_NESTING = "block_nesting"
    ATTRIBUTE_ASSIGNMENT = "attribute_assignment"
    LABEL_MATCHING = "label_matching"
    NAMESPACE_SCOPING = "namespace_scoping"
    NAMING_CONVENTION = "naming_convention"
    RESOURCE_PROXIMITY = "resource_proximity"
    TYPE_COMPATIBILITY = "type_compatibility"
    HISTORICAL_PATTERN = "historical_pattern"

    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "EvidenceType":
        return cls.UNKNOWN


class EvidenceCategory(StrEnum):
    EXPLICIT = "explicit"
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    STRUCTURAL = "structural"
    HEURISTIC = "heuristic"


class EvidenceMethod(StrEnum):
    """How a piece of evidence was collected."""
    AST_ANALYSIS = "ast_analysis"
    REGEX_MATCH = "regex_match"
    SEMANTIC_ANALYSIS = "semantic_analysis"
    HEURISTIC = "heuristic"
    EXTERNAL = "external"


class ConfidenceLevel(StrEnum):
    CERTAIN = "certain"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNCERTAIN = "uncertain"


# Minimum value (inclusive) for each level, checked top-down.
CONFIDENCE_THRESHOLDS: Dict[ConfidenceLevel, int] = {
    ConfidenceLevel.CERTAIN: 95,
    ConfidenceLevel.HIGH: 80,
    ConfidenceLevel.MEDIUM: 60,
    ConfidenceLevel.LOW: 40,
    ConfidenceLevel.UNCERTAIN: 0,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return math.floor(value + 0.5)


def get_confidence_level(value: float) -> ConfidenceLevel:
    """Map a 0..100 value onto its confidence level."""
    for level, threshold in CONFIDENCE_THRESHOLDS.items():
        if value >= threshold:
            return level
    return ConfidenceLevel.UNCERTAIN


_SYNTAX_TYPES = {
    EvidenceType.EXPLICIT_REFERENCE,
    EvidenceType.DEPENDS_ON_DIRECTIVE,
    EvidenceType.MODULE_SOURCE,
    EvidenceType.PROVIDER_ALIAS,
    EvidenceType.VARIABLE_DEFAULT,
}
_SEMANTIC_TYPES = {
    EvidenceType.INTERPOLATION,
    EvidenceType.FUNCTION_CALL,
    EvidenceType.FOR_EXPRESSION,
    EvidenceType.CONDITIONAL,
    EvidenceType.SPLAT_OPERATION,
}
_STRUCTURAL_TYPES = {
    EvidenceType.BLOCK_NESTING,
    EvidenceType.ATTRIBUTE_ASSIGNMENT,
    EvidenceType.LABEL_MATCHING,
    EvidenceType.NAMESPACE_SCOPING,
}


def default_category_for(evidence_type: EvidenceType) -> EvidenceCategory:
    """Category a detector assigns when it does not pick one explicitly."""
    if evidence_type in _SYNTAX_TYPES:
        return EvidenceCategory.SYNTAX
    if evidence_type in _SEMANTIC_TYPES:
        return EvidenceCategory.SEMANTIC
    if evidence_type in _STRUCTURAL_TYPES:
        return EvidenceCategory.STRUCTURAL
    return EvidenceCategory.HEURISTIC


class LineRange(BaseModel):
    start: int = Field(ge=1)
    end: int = Field(ge=1)

    model_config = ConfigDict(frozen=True)


class EvidenceLocation(BaseModel):
    file: str
    lines: Optional[LineRange] = None
    columns: Optional[LineRange] = None

    model_config = ConfigDict(frozen=True)


class Evidence(BaseModel):
    """A single observed signal for a relationship."""
    id: str = Field(default_factory=lambda: f"ev-{uuid.uuid4().hex[:12]}")
    type: EvidenceType
    description: str = ""
    category: EvidenceCategory = EvidenceCategory.HEURISTIC
    location: Optional[EvidenceLocation] = None
    confidence: int = Field(ge=0, le=100)
    raw: Optional[Any] = None
    collected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    method: EvidenceMethod = EvidenceMethod.AST_ANALYSIS

    model_config = ConfigDict(frozen=True)


def create_evidence(
    evidence_type: Union[EvidenceType, str],
    confidence: int,
    description: str = "",
    category: Optional[EvidenceCategory] = None,
    location: Optional[EvidenceLocation] = None,
    method: EvidenceMethod = EvidenceMethod.AST_ANALYSIS,
    raw: Optional[Any] = None,
) -> Evidence:
    """Build an Evidence item with a generated id and the default category."""
    evidence_type = EvidenceType(evidence_type)
    return Evidence(
        type=evidence_type,
        description=description,
        category=category or default_category_for(evidence_type),
        location=location,
        confidence=confidence,
        method=method,
        raw=raw,
    )


class EvidenceCollection(BaseModel):
    """Evidence items with their aggregate statistics."""
    items: List[Evidence] = Field(default_factory=list)
    aggregated_confidence: int = 0
    primary_evidence: Optional[Evidence] = None
    count_by_type: Dict[str, int] = Field(default_factory=dict)
    count_by_category: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_items(cls, items: Iterable[Evidence]) -> "EvidenceCollection":
        items = list(items)
        if not items:
            return cls()
        return cls(
            items=items,
            aggregated_confidence=round_half_up(sum(e.confidence for e in items) / len(items)),
            primary_evidence=max(items, key=lambda e: e.confidence),
            count_by_type=dict(Counter(e.type.value for e in items)),
            count_by_category=dict(Counter(e.category.value for e in items)),
        )


class ConfidenceBreakdown(BaseModel):
    base_score: float = 0.0
    evidence_multiplier: float = 1.0
    explicit_bonus: float = 0.0
    heuristic_penalty: float = 0.0
    pattern_bonus: float = 0.0

    model_config = ConfigDict(frozen=True)


class ConfidenceScore(BaseModel):
    """
    Aggregated confidence for a relationship.

    ``level`` is derived from ``value`` when omitted. A score built with an
    explicit, mismatching level is still representable so that
    ``ScoringEngine.validate`` can reject it.
    """
    value: int
    breakdown: ConfidenceBreakdown = Field(default_factory=ConfidenceBreakdown)
    level: ConfidenceLevel = None  # type: ignore[assignment]
    positive_factors: List[str] = Field(default_factory=list)
    negative_factors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _derive_level(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("level") is None and "value" in data:
            data = {**data, "level": get_confidence_level(data["value"])}
        return data


class ConditionOperator(StrEnum):
    EQUALS = "equals"
    CONTAINS = "contains"
    MATCHES = "matches"
    GT = "gt"
    LT = "lt"
    EXISTS = "exists"


class ScoringCondition(BaseModel):
    """A predicate on a dotted field path of an Evidence item."""
    field: str
    operator: ConditionOperator
    value: Optional[Any] = None

    model_config = ConfigDict(frozen=True)


class ScoringRule(BaseModel):
    id: str
    name: str
    description: str = ""
    applies_to: List[EvidenceType] = Field(default_factory=list)
    base_score: float = 0.0
    multiplier: float = 1.0
    conditions: List[ScoringCondition] = Field(default_factory=list)
    priority: int = 0

    model_config = ConfigDict(frozen=True)
