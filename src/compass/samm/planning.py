"""Improvement plan generation from SAMM stream gaps."""

from __future__ import annotations

from typing import Optional

from ..models.samm import ImprovementPlan, ImprovementTask, StreamAssessment, StreamQuestion
from .scoring import stream_maturity


class PlanningError(ValueError):
    """Raised when no plan can be built. ``code`` mirrors the store's error codes."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


def identify_stream_gaps(assessments: list[StreamAssessment]) -> list[StreamAssessment]:
    """Streams whose derived maturity sits below their target level."""
    return [a for a in assessments if stream_maturity(a) < a.target_level]


def _find_question(
    questions: list[StreamQuestion],
    practice_id: str,
    stream_id: str,
    level: int,
) -> Optional[StreamQuestion]:
    return next(
        (
            q for q in questions
            if q.practice_id == practice_id and q.stream_id == stream_id and q.level == level
        ),
        None,
    )


def _level_notes_section(gap: StreamAssessment) -> str:
    notes = [
        f"**Level {level} Notes:** {text}"
        for level, text in sorted(gap.level_notes.items())
        if text and text.strip()
    ]
    if not notes:
        return ""
    return "\n\n**Assessment Level Findings:**\n" + "\n".join(notes)


def _task_description(
    gap: StreamAssessment,
    current: int,
    question: Optional[StreamQuestion],
) -> str:
    level_diff = gap.target_level - current
    level_notes = _level_notes_section(gap)

    if question is None:
        body = gap.notes or "Review SAMM practice requirements and implement necessary improvements."
        return (
            f"**Current Level:** {current} | **Target:** {gap.target_level} | "
            f"**Gap:** {level_diff} level(s)\n\n{body}{level_notes}"
        )

    activities = "\n".join(
        f"{i}. {a}" for i, a in enumerate(question.activities, start=1)
    ) or "Review SAMM practice requirements"
    criteria = "\n".join(
        f"- [ ] {c}" for c in question.quality_criteria
    ) or "See SAMM documentation"

    lines = [
        f"**Stream:** {question.stream_name or gap.stream_id}",
        f"**Question:** {question.question}",
        "",
        f"**Current Level:** {current}",
        f"**Target Level:** {gap.target_level}",
        f"**Gap:** {level_diff} level(s)",
        "",
        "**Required Activities:**",
        activities,
        "",
        "**Quality Criteria:**",
        criteria,
    ]
    if gap.notes:
        lines.extend(["", f"**General Notes:** {gap.notes}"])
    return "\n".join(lines) + level_notes


def build_improvement_tasks(
    gaps: list[StreamAssessment],
    questions: Optional[list[StreamQuestion]] = None,
) -> list[ImprovementTask]:
    """One backlog task per gap stream, targeting the question at its target level."""
    questions = questions or []
    tasks: list[ImprovementTask] = []

    for gap in gaps:
        current = stream_maturity(gap)
        level_diff = gap.target_level - current
        question = _find_question(questions, gap.practice_id, gap.stream_id, gap.target_level)

        tasks.append(ImprovementTask(
            title=f"{gap.practice_id}-{gap.stream_id}: Improve to Level {gap.target_level}",
            description=_task_description(gap, current, question),
            practice_id=gap.practice_id,
            stream_id=gap.stream_id,
            current_level=current,
            target_level=gap.target_level,
            priority="high" if level_diff > 1 else "medium",
            tags=[gap.practice_id, gap.stream_id, "SAMM-v2", f"L{gap.target_level}"],
        ))

    return tasks


def generate_improvement_plan(
    client_id: Optional[int],
    assessments: list[StreamAssessment],
    questions: Optional[list[StreamQuestion]] = None,
    plan_id: Optional[int] = None,
) -> ImprovementPlan:
    """Build an improvement plan for every stream below target.

    Raises:
        PlanningError: NOT_FOUND when nothing is assessed, BAD_REQUEST when
            every assessed stream already meets its target.
    """
    if not assessments:
        raise PlanningError(
            "NOT_FOUND",
            "No SAMM assessments found. Please complete stream assessments first.",
        )

    gaps = identify_stream_gaps(assessments)
    if not gaps:
        raise PlanningError(
            "BAD_REQUEST",
            "No improvement gaps found. All assessed streams are at or above target level.",
        )

    noun = "stream" if len(gaps) == 1 else "streams"
    return ImprovementPlan(
        plan_id=plan_id,
        client_id=client_id,
        description=(
            f"Generated from SAMM v2 stream-based assessment. {len(gaps)} {noun} "
            f"identified for improvement out of {len(assessments)} assessed streams."
        ),
        tasks=build_improvement_tasks(gaps, questions),
        gaps=len(gaps),
        total_assessed=len(assessments),
    )
