"""
Rule engine for evidence scoring.

A rule applies to a set of evidence types and matches when at least one
applicable evidence item satisfies every one of its conditions. A matching
rule contributes ``base_score * multiplier * matched_count``.
"""

import logging
import re
from functools import lru_cache
from typing import Any, List, Optional, Pattern, Sequence

from pydantic import BaseModel, Field

from ..core.evidence import (
    ConditionOperator,
    Evidence,
    EvidenceType,
    ScoringCondition,
    ScoringRule,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class RuleEvaluationResult(BaseModel):
    rule: ScoringRule
    matched: bool
    score_contribution: float = 0.0
    matched_evidence: List[Evidence] = Field(default_factory=list)


class RuleValidationResult(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Optional[Pattern]:
    try:
        return re.compile(pattern)
    except re.error as e:
        logger.debug("Invalid rule pattern %r: %s", pattern, e)
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_field(obj: Any, path: str) -> Any:
    """
    Dotted-path lookup through models and mappings (``location.file``).

    Returns the module-level ``_MISSING`` sentinel when any segment is absent.
    """
    value = obj
    for part in path.split("."):
        if isinstance(value, BaseModel):
            if part not in type(value).model_fields and part not in (value.model_extra or {}):
                return _MISSING
            value = getattr(value, part)
        elif isinstance(value, dict):
            if part not in value:
                return _MISSING
            value = value[part]
        else:
            return _MISSING
    return value


class RuleEngine:
    """Evaluates scoring rules against evidence."""

    def evaluate(self, evidence: Sequence[Evidence], rules: Sequence[ScoringRule]) -> List[RuleEvaluationResult]:
        results: List[RuleEvaluationResult] = []
        for rule in sorted(rules, key=lambda r: r.priority, reverse=True):
            matched = [
                item for item in evidence
                if item.type in rule.applies_to and self._check_conditions(item, rule.conditions)
            ]
            contribution = rule.base_score * rule.multiplier * len(matched) if matched else 0.0
            results.append(RuleEvaluationResult(
                rule=rule,
                matched=bool(matched),
                score_contribution=contribution,
                matched_evidence=matched,
            ))
        return results

    def match_condition(self, evidence: Evidence, condition: ScoringCondition) -> bool:
        value = resolve_field(evidence, condition.field)
        expected = condition.value
        operator = condition.operator

        if operator == ConditionOperator.EXISTS:
            present = value is not _MISSING and value is not None
            # A falsy expected value asks for absence.
            return present if expected is None or bool(expected) else not present

        if value is _MISSING:
            return False

        if operator == ConditionOperator.EQUALS:
            if isinstance(value, bool) != isinstance(expected, bool):
                return False
            return value == expected
        if operator == ConditionOperator.CONTAINS:
            return isinstance(value, str) and isinstance(expected, str) and expected in value
        if operator == ConditionOperator.MATCHES:
            if not isinstance(value, str) or not isinstance(expected, str):
                return False
            pattern = _compile(expected)
            return pattern is not None and pattern.search(value) is not None
        if operator == ConditionOperator.GT:
            return _is_number(value) and _is_number(expected) and value > expected
        if operator == ConditionOperator.LT:
            return _is_number(value) and _is_number(expected) and value < expected
        return False

    def get_applicable_rules(self, evidence_type: EvidenceType, rules: Sequence[ScoringRule]) -> List[ScoringRule]:
        return [rule for rule in rules if evidence_type in rule.applies_to]

    def validate_rules(self, rules: Sequence[ScoringRule]) -> RuleValidationResult:
        """Strict configuration check, including regex syntax."""
        errors: List[str] = []
        warnings: List[str] = []

        for rule in rules:
            label = rule.id or "unknown"
            if not rule.id:
                errors.append("Rule missing id")
            if not rule.name:
                errors.append(f"Rule {label} missing name")
            if not rule.applies_to:
                errors.append(f"Rule {label} has no applies_to types")

            if not 0 <= rule.base_score <= 100:
                warnings.append(f"Rule {label} base_score ({rule.base_score}) outside typical range")
            if not 0 <= rule.multiplier <= 2:
                warnings.append(f"Rule {label} multiplier ({rule.multiplier}) outside typical range")
            if not 0 <= rule.priority <= 100:
                warnings.append(f"Rule {label} priority ({rule.priority}) outside typical range")

            for condition in rule.conditions:
                if not condition.field:
                    errors.append(f"Rule {label} has condition with missing field")
                if condition.operator == ConditionOperator.MATCHES:
                    if not isinstance(condition.value, str) or _compile(condition.value) is None:
                        errors.append(f"Rule {label} has invalid pattern: {condition.value!r}")

        return RuleValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def _check_conditions(self, evidence: Evidence, conditions: Sequence[ScoringCondition]) -> bool:
        return all(self.match_condition(evidence, c) for c in conditions)


def _rule(rule_id: str, name: str, description: str, applies_to: EvidenceType,
          base_score: float, multiplier: float, priority: int) -> ScoringRule:
    return ScoringRule(
        id=rule_id,
        name=name,
        description=description,
        applies_to=[applies_to],
        base_score=base_score,
        multiplier=multiplier,
        priority=priority,
    )


# Built-in rules. Contributions are small bonuses on top of the evidence terms.
DEFAULT_RULES: List[ScoringRule] = [
    _rule("explicit-depends-on", "Explicit depends_on", "Direct depends_on declaration",
          EvidenceType.DEPENDS_ON_DIRECTIVE, 4.0, 1.2, 100),
    _rule("explicit-reference", "Explicit Reference", "Direct attribute reference (resource.name.attr)",
          EvidenceType.EXPLICIT_REFERENCE, 3.5, 1.0, 95),
    _rule("module-source", "Module Source", "Module source declaration",
          EvidenceType.MODULE_SOURCE, 3.0, 1.0, 90),
    _rule("interpolation", "String Interpolation", "Reference via string interpolation",
          EvidenceType.INTERPOLATION, 2.5, 1.0, 80),
    _rule("label-matching", "Label Matching", "Kubernetes label/selector matching",
          EvidenceType.LABEL_MATCHING, 2.5, 1.0, 75),
    _rule("function-call", "Function Call", "Reference via function argument",
          EvidenceType.FUNCTION_CALL, 2.0, 1.0, 70),
    _rule("naming-convention", "Naming Convention", "Inferred from naming patterns",
          EvidenceType.NAMING_CONVENTION, 1.0, 0.8, 30),
    _rule("resource-proximity", "Resource Proximity", "Resources in the same file or module",
          EvidenceType.RESOURCE_PROXIMITY, 0.5, 0.7, 20),
]


def evaluate_rules(evidence: Sequence[Evidence], rules: Sequence[ScoringRule]) -> List[RuleEvaluationResult]:
    return RuleEngine().evaluate(evidence, rules)
