"""OWASP SAMM v2 data models."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

StreamId = Literal["A", "B"]

BUSINESS_FUNCTIONS: list[str] = [
    "Governance",
    "Design",
    "Implementation",
    "Verification",
    "Operations",
]


def normalize_level_map(mapping: Optional[dict[Any, Any]]) -> dict[int, Any]:
    """Return a copy of ``mapping`` keyed by integer level.

    Stored records arrive with JSON object keys ("1") while in-memory edits
    use ints; both collapse to int here. Non-numeric keys raise ValueError.
    """
    if not mapping:
        return {}
    result: dict[int, Any] = {}
    for key, value in mapping.items():
        if isinstance(key, bool):
            raise ValueError(f"Invalid level key: {key!r}")
        try:
            level = int(str(key).strip())
        except ValueError:
            raise ValueError(f"Invalid level key: {key!r}") from None
        result[level] = value
    return result


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class Practice(_Record):
    """Static reference data for one of the 15 SAMM practices."""

    practice_id: str
    practice_name: str
    business_function: str
    stream_a_name: str = ""
    stream_a_description: str = ""
    stream_b_name: str = ""
    stream_b_description: str = ""
    description: str = ""
    order: int = 0


class StreamQuestion(_Record):
    id: Optional[int] = None
    practice_id: str
    stream_id: StreamId
    stream_name: str = ""
    level: int = Field(ge=0, le=3)
    question: str
    quality_criteria: list[str] = []
    activities: list[str] = []
    benefits: str = ""
    suggested_evidence: list[str] = []


class StreamAssessment(_Record):
    """Assessment record owned per (client, practice, stream).

    ``maturity_level`` is a cache written at save time. Readers should derive
    maturity from ``assessment_answers`` instead of trusting it.
    """

    id: Optional[int] = None
    client_id: Optional[int] = None
    practice_id: str
    stream_id: StreamId
    assessment_answers: dict[int, bool] = {}
    quality_criteria: dict[int, dict[int, bool]] = {}
    level_notes: dict[int, str] = {}
    notes: str = ""
    target_level: int = Field(default=1, ge=0, le=3)
    maturity_level: int = Field(default=0, ge=0, le=3)

    @field_validator("assessment_answers", "level_notes", mode="before")
    @classmethod
    def _normalize_levels(cls, value: Any) -> dict[int, Any]:
        return normalize_level_map(value)

    @field_validator("quality_criteria", mode="before")
    @classmethod
    def _normalize_quality(cls, value: Any) -> dict[int, dict[int, Any]]:
        return {
            level: normalize_level_map(items)
            for level, items in normalize_level_map(value).items()
        }

    @field_validator("notes", mode="before")
    @classmethod
    def _none_notes(cls, value: Any) -> Any:
        return value or ""


class StreamLevel(BaseModel):
    level: int = 0
    target: int = 0


class PracticeScore(BaseModel):
    practice_id: str
    score: float = 0.0
    target: float = 0.0
    stream_a: Optional[StreamLevel] = None
    stream_b: Optional[StreamLevel] = None


class PracticeRollup(BaseModel):
    current: float = 0.0
    target: float = 0.0


class BusinessFunctionScore(BaseModel):
    score: float = 0.0
    target: float = 0.0


class OverallScore(_Record):
    overall_score: float = 0.0
    overall_target: float = 0.0
    business_functions: dict[str, BusinessFunctionScore] = {}
    practice_scores: dict[str, PracticeRollup] = {}
    assessed_streams: int = 0
    total_streams: int = 30


class ImprovementTask(_Record):
    title: str
    description: str
    practice_id: str
    stream_id: StreamId
    current_level: int
    target_level: int
    priority: Literal["high", "medium"]
    status: str = "backlog"
    pdca: str = "Plan"
    tags: list[str] = []


class ImprovementPlan(_Record):
    plan_id: Optional[int] = None
    client_id: Optional[int] = None
    title: str = "SAMM v2 Improvement Plan"
    description: str = ""
    status: str = "planning"
    priority: str = "high"
    tasks: list[ImprovementTask] = []
    gaps: int = 0
    total_assessed: int = 0
