from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class EscalationFlag(str, Enum):
    RATING_MISMATCH_OVERALL = "RatingMismatch_Overall_2+Levels"
    RATING_MISMATCH_GOALS = "RatingMismatch_Goals_2+Levels"
    RATING_MISMATCH_VALUES = "RatingMismatch_Values_2+Levels"
    NARRATIVE_INSUFFICIENT = "NarrativeInsufficient"
    LOADED_LANGUAGE = "LoadedLanguage_NoEvidence"
    POLICY_SENSITIVE = "PolicySensitive_EscalateHR"
    UNKNOWN_RATING_LABEL = "UnknownRatingLabel"
    ANALYSIS_ERROR = "AnalysisError"


FLAG_DISPLAY_TEXT: dict[EscalationFlag, str] = {
    EscalationFlag.RATING_MISMATCH_OVERALL: "Overall ratings differ by two or more levels",
    EscalationFlag.RATING_MISMATCH_GOALS: "Goal ratings differ by two or more levels",
    EscalationFlag.RATING_MISMATCH_VALUES: "Values ratings differ by two or more levels",
    EscalationFlag.NARRATIVE_INSUFFICIENT: "Manager narrative is missing or too short",
    EscalationFlag.LOADED_LANGUAGE: "Subjective language without concrete evidence",
    EscalationFlag.POLICY_SENSITIVE: "Policy-sensitive content, escalate to HR",
    EscalationFlag.UNKNOWN_RATING_LABEL: "Rating label not recognised",
    EscalationFlag.ANALYSIS_ERROR: "Record could not be analysed",
}


class Recommendation(str, Enum):
    GREEN = "GREEN"
    RED = "RED"


class ValuesAlignment(str, Enum):
    ALIGNED = "Aligned"
    PARTIALLY_ALIGNED = "Partially aligned"
    MISALIGNED = "Misaligned"


class RatingConsistency(str, Enum):
    CONSISTENT = "Consistent"
    INCONSISTENT = "Inconsistent"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class EmployeeRecord(_CamelModel):
    employee_id: str
    goal_employee_rating: str | None = None
    goal_manager_rating: str | None = None
    values_employee_rating: str | None = None
    values_manager_rating: str | None = None
    overall_rating_employee: str | None = None
    overall_rating_manager: str | None = None
    manager_comments: str | None = None


class AnalysisResult(_CamelModel):
    employee_id: str
    bias_assessment: str
    values_alignment: ValuesAlignment
    rating_consistency: RatingConsistency
    rating_consistency_rationale: str
    ai_recommendation: Recommendation
    flags_triggered: list[EscalationFlag] = Field(default_factory=list)

    @field_validator("flags_triggered", mode="after")
    @classmethod
    def _collapse_duplicates(cls, flags: list[EscalationFlag]) -> list[EscalationFlag]:
        return list(dict.fromkeys(flags))

    @model_validator(mode="after")
    def _check_recommendation(self) -> "AnalysisResult":
        escalated = self.ai_recommendation is Recommendation.RED
        if escalated != bool(self.flags_triggered):
            raise ValueError("recommendation must be RED exactly when flags are present")
        return self


class RunHistoryEntry(_CamelModel):
    review_batch: str
    run_id: str
    submitted_at: str
    file_name: str
    total_employees: int = 0
    red_count: int = 0
    green_count: int = 0
    status: Literal["Completed", "Failed"]
    output_file_name: str = ""
    error_message: str | None = None
