from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from equityreview.core.ratings import RatingNormalizer
from equityreview.core.schema import (
    AnalysisResult,
    EmployeeRecord,
    EscalationFlag,
    RatingConsistency,
    Recommendation,
    ValuesAlignment,
)

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

MIN_NARRATIVE_LENGTH = 20
MISMATCH_LEVELS = 2

BIAS_POLICY_SENSITIVE = "Policy-sensitive content detected - requires HR review for compliance."
BIAS_LOADED_LANGUAGE = (
    "Potential bias indicators present: subjective language used without supporting evidence."
)
BIAS_NONE = "No significant bias indicators detected in the review narrative."

RATIONALE_CONSISTENT = "All ratings appear consistent within expected variance."
RATIONALE_INCONSISTENT = "Significant variance detected between employee and manager ratings."


@dataclass(frozen=True)
class EscalationTerms:
    loaded_language: tuple[str, ...]
    evidence_markers: tuple[str, ...]
    evidence_date_pattern: re.Pattern[str]
    policy_sensitive: tuple[str, ...]


def _load_terms() -> EscalationTerms:
    path = CONFIG_DIR / "escalation_terms.yaml"
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp)
    return EscalationTerms(
        loaded_language=tuple(term.lower() for term in data["loaded_language_terms"]),
        evidence_markers=tuple(term.lower() for term in data["evidence_markers"]),
        evidence_date_pattern=re.compile(data["evidence_date_pattern"]),
        policy_sensitive=tuple(term.lower() for term in data["policy_sensitive_terms"]),
    )


TERMS = _load_terms()


@dataclass
class _Escalation:
    """Flag accumulator; the recommendation only ever moves from GREEN to RED."""

    flags: list[EscalationFlag] = field(default_factory=list)
    recommendation: Recommendation = Recommendation.GREEN

    def raise_flag(self, flag: EscalationFlag) -> None:
        if flag not in self.flags:
            self.flags.append(flag)
        self.recommendation = Recommendation.RED


def _mismatch(employee: int | None, manager: int | None) -> bool:
    if employee is None or manager is None:
        return False
    return abs(employee - manager) >= MISMATCH_LEVELS


def has_loaded_language(text: str) -> bool:
    return any(term in text for term in TERMS.loaded_language)


def has_evidence(text: str) -> bool:
    if any(marker in text for marker in TERMS.evidence_markers):
        return True
    return TERMS.evidence_date_pattern.search(text) is not None


def has_policy_sensitive_terms(text: str) -> bool:
    return any(term in text for term in TERMS.policy_sensitive)


def _consistency(ordinals: list[int]) -> tuple[RatingConsistency, str]:
    # every pair differs by at most max - min
    if ordinals and max(ordinals) - min(ordinals) >= MISMATCH_LEVELS:
        return RatingConsistency.INCONSISTENT, RATIONALE_INCONSISTENT
    return RatingConsistency.CONSISTENT, RATIONALE_CONSISTENT


def _values_alignment(employee: int | None, manager: int | None) -> ValuesAlignment:
    # missing information is not treated as evidence of misalignment
    if employee is None or manager is None:
        return ValuesAlignment.ALIGNED
    diff = abs(employee - manager)
    if diff == 0:
        return ValuesAlignment.ALIGNED
    if diff == 1:
        return ValuesAlignment.PARTIALLY_ALIGNED
    return ValuesAlignment.MISALIGNED


def evaluate(record: EmployeeRecord) -> AnalysisResult:
    """Classify one employee record against the fixed escalation rules."""

    escalation = _Escalation()
    normalizer = RatingNormalizer(
        on_unknown=lambda _label: escalation.raise_flag(EscalationFlag.UNKNOWN_RATING_LABEL)
    )

    overall_emp = normalizer.normalize(record.overall_rating_employee)
    overall_mgr = normalizer.normalize(record.overall_rating_manager)
    goal_emp = normalizer.normalize(record.goal_employee_rating)
    goal_mgr = normalizer.normalize(record.goal_manager_rating)
    values_emp = normalizer.normalize(record.values_employee_rating)
    values_mgr = normalizer.normalize(record.values_manager_rating)

    pairs = [
        (overall_emp, overall_mgr, EscalationFlag.RATING_MISMATCH_OVERALL),
        (goal_emp, goal_mgr, EscalationFlag.RATING_MISMATCH_GOALS),
        (values_emp, values_mgr, EscalationFlag.RATING_MISMATCH_VALUES),
    ]
    for employee, manager, flag in pairs:
        if _mismatch(employee, manager):
            escalation.raise_flag(flag)

    narrative = record.manager_comments
    if narrative is None or len(narrative.strip()) < MIN_NARRATIVE_LENGTH:
        escalation.raise_flag(EscalationFlag.NARRATIVE_INSUFFICIENT)

    text = (narrative or "").lower()
    if has_loaded_language(text) and not has_evidence(text):
        escalation.raise_flag(EscalationFlag.LOADED_LANGUAGE)
    if has_policy_sensitive_terms(text):
        escalation.raise_flag(EscalationFlag.POLICY_SENSITIVE)

    ordinals = [
        value
        for value in (overall_emp, overall_mgr, goal_emp, goal_mgr, values_emp, values_mgr)
        if value is not None
    ]
    consistency, rationale = _consistency(ordinals)

    if EscalationFlag.POLICY_SENSITIVE in escalation.flags:
        bias = BIAS_POLICY_SENSITIVE
    elif EscalationFlag.LOADED_LANGUAGE in escalation.flags:
        bias = BIAS_LOADED_LANGUAGE
    else:
        bias = BIAS_NONE

    return AnalysisResult(
        employee_id=record.employee_id,
        bias_assessment=bias,
        values_alignment=_values_alignment(values_emp, values_mgr),
        rating_consistency=consistency,
        rating_consistency_rationale=rationale,
        ai_recommendation=escalation.recommendation,
        flags_triggered=escalation.flags,
    )


def analysis_failure(employee_id: str) -> AnalysisResult:
    """Canned result substituted for a record whose analysis raised."""

    return AnalysisResult(
        employee_id=employee_id,
        bias_assessment="Analysis failed",
        values_alignment=ValuesAlignment.MISALIGNED,
        rating_consistency=RatingConsistency.INCONSISTENT,
        rating_consistency_rationale="Unable to complete analysis",
        ai_recommendation=Recommendation.RED,
        flags_triggered=[EscalationFlag.ANALYSIS_ERROR],
    )
