"""SOC 2 readiness scoring, gap analysis and roadmap projection.

Everything here is derived from the criteria list on each call; no state is
kept between calls.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime
from typing import Optional

from ..models.soc2 import (
    MATURITY_WEIGHTS,
    Gap,
    MaturityLevel,
    Milestone,
    ReadinessReport,
    ReadinessStatus,
    Soc2Type,
    TrustCriterion,
)

MATURITY_WEIGHT = 0.7
IMPLEMENTATION_WEIGHT = 0.3

ROADMAP_ORDERS = ("source", "priority")

RECOMMENDATIONS: dict[str, list[str]] = {
    "low": [
        "Focus on implementing basic security controls across all Trust Services Criteria",
        "Establish formal information security policies and procedures",
        "Conduct comprehensive risk assessment and treatment planning",
    ],
    "medium": [
        "Enhance existing controls to achieve defined or managed maturity levels",
        "Implement automated monitoring and measurement processes",
        "Establish formal incident response and management procedures",
    ],
    "high": [
        "Prepare for SOC 2 Type 2 audit readiness assessment",
        "Implement continuous monitoring and improvement processes",
        "Enhance documentation and evidence collection procedures",
    ],
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_readiness_score(criteria: list[TrustCriterion]) -> int:
    """Weighted readiness: 70% average maturity, 30% implementation ratio.

    Returns an integer in [0, 100]; an empty list scores 0.
    """
    total = len(criteria)
    if total == 0:
        return 0

    implemented = sum(1 for c in criteria if c.implemented)
    maturity_total = sum(MATURITY_WEIGHTS.get(c.maturity, 0) for c in criteria)

    avg_maturity = maturity_total / total
    implementation_score = (implemented / total) * 100

    return _round_half_up(
        avg_maturity * MATURITY_WEIGHT + implementation_score * IMPLEMENTATION_WEIGHT
    )


def get_readiness_status(score: int) -> ReadinessStatus:
    if score >= 80:
        return ReadinessStatus.AUDIT_READY
    if score >= 60:
        return ReadinessStatus.READY_FOR_REVIEW
    return ReadinessStatus.NEEDS_IMPROVEMENT


def generate_gap_analysis(criteria: list[TrustCriterion]) -> list[Gap]:
    """Gaps in criteria order. Security gaps are always high priority."""
    gaps: list[Gap] = []
    for c in criteria:
        if c.implemented and c.maturity != MaturityLevel.NOT_IMPLEMENTED:
            continue
        gaps.append(Gap(
            category=c.category,
            principle=c.principle,
            criteria=c.criteria,
            gap="Not Implemented" if not c.implemented else "Low Maturity",
            priority="high" if c.principle == "Security" else "medium",
            effort="high" if c.maturity == MaturityLevel.NOT_IMPLEMENTED else "medium",
        ))
    return gaps


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping to the last day of the month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_roadmap(
    gaps: list[Gap],
    today: Optional[date] = None,
    order: str = "source",
    interval_months: int = 2,
) -> list[Milestone]:
    """Project gaps onto a linear chain of milestones.

    ``order="source"`` keeps gap order as derived from the criteria list;
    ``order="priority"`` moves high-priority gaps to the front (stable).
    """
    if order not in ROADMAP_ORDERS:
        raise ValueError(f"Unknown roadmap order: {order}")

    start = today or date.today()
    ordered = list(gaps)
    if order == "priority":
        ordered.sort(key=lambda g: 0 if g.priority == "high" else 1)

    milestones: list[Milestone] = []
    for index, gap in enumerate(ordered):
        target = add_months(start, (index + 1) * interval_months)
        milestones.append(Milestone(
            id=f"milestone_{index}",
            title=f"Implement {gap.principle} Controls",
            description=f"Address {gap.gap} in {gap.criteria}",
            target_date=target.isoformat(),
            status="pending",
            dependencies=[f"milestone_{index - 1}"] if index > 0 else [],
            priority=gap.priority,
        ))
    return milestones


def get_milestone_progress(status: str) -> int:
    if status == "completed":
        return 100
    if status == "in-progress":
        return 50
    return 0


def generate_recommendations(score: int, gaps: list[Gap]) -> list[str]:
    if score < 60:
        recommendations = list(RECOMMENDATIONS["low"])
    elif score < 80:
        recommendations = list(RECOMMENDATIONS["medium"])
    else:
        recommendations = list(RECOMMENDATIONS["high"])

    high_risk = list(dict.fromkeys(g.category for g in gaps if g.priority == "high"))
    if high_risk:
        recommendations.append(f"Prioritize improvements in: {', '.join(high_risk)}")

    return recommendations


def build_readiness_report(
    criteria: list[TrustCriterion],
    organization: str = "",
    soc2_type: Soc2Type | str = Soc2Type.TYPE2,
    system_description: str = "",
    service_description: str = "",
    target_score: int = 80,
    today: Optional[date] = None,
    order: str = "source",
    interval_months: int = 2,
) -> ReadinessReport:
    """Derive the full readiness assessment from scratch."""
    score = calculate_readiness_score(criteria)
    gaps = generate_gap_analysis(criteria)

    return ReadinessReport(
        organization=organization,
        soc2_type=Soc2Type(soc2_type),
        system_description=system_description,
        service_description=service_description,
        readiness_score=score,
        target_score=target_score,
        status=get_readiness_status(score),
        gaps=gaps,
        roadmap=generate_roadmap(gaps, today=today, order=order, interval_months=interval_months),
        recommendations=generate_recommendations(score, gaps),
        last_updated=datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
        trust_criteria=list(criteria),
    )
