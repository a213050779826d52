"""SOC 2 readiness data models."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MaturityLevel(str, Enum):
    NOT_IMPLEMENTED = "not-implemented"
    INITIAL = "initial"
    REPEATABLE = "repeatable"
    DEFINED = "defined"
    MANAGED = "managed"
    MEASURED = "measured"
    OPTIMIZED = "optimized"


MATURITY_WEIGHTS: dict[MaturityLevel, int] = {
    MaturityLevel.NOT_IMPLEMENTED: 0,
    MaturityLevel.INITIAL: 20,
    MaturityLevel.REPEATABLE: 40,
    MaturityLevel.DEFINED: 60,
    MaturityLevel.MANAGED: 80,
    MaturityLevel.MEASURED: 90,
    MaturityLevel.OPTIMIZED: 100,
}

MATURITY_LABELS: dict[MaturityLevel, str] = {
    MaturityLevel.NOT_IMPLEMENTED: "Not Implemented",
    MaturityLevel.INITIAL: "Initial",
    MaturityLevel.REPEATABLE: "Repeatable",
    MaturityLevel.DEFINED: "Defined",
    MaturityLevel.MANAGED: "Managed",
    MaturityLevel.MEASURED: "Measured",
    MaturityLevel.OPTIMIZED: "Optimized",
}


class ReadinessStatus(str, Enum):
    AUDIT_READY = "Audit Ready"
    READY_FOR_REVIEW = "Ready for Review"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class Soc2Type(str, Enum):
    TYPE1 = "type1"
    TYPE2 = "type2"


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class TrustCriterion(_Record):
    """One assessed Trust Services criterion.

    ``implemented`` and ``maturity`` are edited independently, so a criterion
    may be unimplemented while still carrying a stale maturity value.
    """

    id: str
    category: str
    principle: str
    criteria: str
    points: list[str] = []
    implemented: bool = False
    evidence: list[str] = []
    maturity: MaturityLevel = MaturityLevel.NOT_IMPLEMENTED
    notes: str = ""


class Gap(_Record):
    category: str
    principle: str
    criteria: str
    gap: Literal["Not Implemented", "Low Maturity"]
    priority: Literal["high", "medium"]
    effort: Literal["high", "medium"]


class Milestone(_Record):
    id: str
    title: str
    description: str
    target_date: str
    status: Literal["pending", "in-progress", "completed"] = "pending"
    dependencies: list[str] = []
    priority: Literal["high", "medium", "low"] = "medium"


class ReadinessReport(_Record):
    """Full readiness assessment, derived from the criteria on every build."""

    organization: str = ""
    soc2_type: Soc2Type = Soc2Type.TYPE2
    system_description: str = ""
    service_description: str = ""
    readiness_score: int = 0
    target_score: int = 80
    status: ReadinessStatus = ReadinessStatus.NEEDS_IMPROVEMENT
    gaps: list[Gap] = []
    roadmap: list[Milestone] = []
    recommendations: list[str] = []
    last_updated: str = ""
    trust_criteria: list[TrustCriterion] = Field(default_factory=list)
