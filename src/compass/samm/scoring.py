"""SAMM v2 maturity scoring.

Stream maturity is a sequential gate over per-level answers. Practice scores
average the two streams; business functions and the overall program average
the practice scores beneath them.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Optional

from ..models.samm import (
    BusinessFunctionScore,
    OverallScore,
    Practice,
    PracticeRollup,
    PracticeScore,
    StreamAssessment,
    StreamLevel,
    normalize_level_map,
)

MAX_LEVEL = 3


def calculate_stream_maturity(answers: Optional[dict[Any, Any]]) -> int:
    """Return the highest level reached without skipping a lower one.

    ``{1: True, 2: False, 3: True}`` scores 1: level 3 cannot count while
    level 2 is unmet.
    """
    levels = normalize_level_map(answers)
    maturity = 0
    for level in range(1, MAX_LEVEL + 1):
        if not levels.get(level):
            break
        maturity = level
    return maturity


def stream_maturity(assessment: Optional[StreamAssessment]) -> int:
    """Maturity of a stored stream, re-derived from its answers."""
    if assessment is None:
        return 0
    return calculate_stream_maturity(assessment.assessment_answers)


def calculate_practice_score(
    practice_id: str,
    stream_a: Optional[StreamAssessment],
    stream_b: Optional[StreamAssessment],
) -> PracticeScore:
    """Average the two stream maturities. Missing streams count as 0."""
    level_a = stream_maturity(stream_a)
    level_b = stream_maturity(stream_b)
    target_a = stream_a.target_level if stream_a else 0
    target_b = stream_b.target_level if stream_b else 0

    return PracticeScore(
        practice_id=practice_id,
        score=(level_a + level_b) / 2,
        target=(target_a + target_b) / 2,
        stream_a=StreamLevel(level=level_a, target=target_a) if stream_a else None,
        stream_b=StreamLevel(level=level_b, target=target_b) if stream_b else None,
    )


def get_practice_status(score: float) -> str:
    """Map a 0-3 practice score to its status label."""
    if score == 3:
        return "Optimized"
    if score >= 2:
        return "Managed"
    if score >= 1:
        return "Defined"
    return "Initial"


def index_assessments(
    assessments: list[StreamAssessment],
) -> dict[tuple[str, str], StreamAssessment]:
    """Key assessments by (practice_id, stream_id). Later records win."""
    return {(a.practice_id, a.stream_id): a for a in assessments}


def calculate_practice_scores(
    practices: list[Practice],
    assessments: list[StreamAssessment],
) -> dict[str, PracticeScore]:
    by_stream = index_assessments(assessments)
    return {
        p.practice_id: calculate_practice_score(
            p.practice_id,
            by_stream.get((p.practice_id, "A")),
            by_stream.get((p.practice_id, "B")),
        )
        for p in practices
    }


def calculate_business_function_scores(
    practices: list[Practice],
    practice_scores: dict[str, PracticeScore],
    function_targets: Optional[dict[str, float]] = None,
) -> dict[str, BusinessFunctionScore]:
    """Average practice scores per business function.

    Targets come from ``function_targets`` when given, otherwise from the
    mean of the practice targets.
    """
    grouped: dict[str, list[PracticeScore]] = defaultdict(list)
    for practice in practices:
        score = practice_scores.get(practice.practice_id)
        if score is not None:
            grouped[practice.business_function].append(score)

    result: dict[str, BusinessFunctionScore] = {}
    for function, scores in grouped.items():
        count = len(scores)
        current = sum(s.score for s in scores) / count if count else 0.0
        if function_targets and function in function_targets:
            target = float(function_targets[function])
        else:
            target = sum(s.target for s in scores) / count if count else 0.0
        result[function] = BusinessFunctionScore(score=current, target=target)
    return result


def calculate_overall_score(
    practices: list[Practice],
    assessments: list[StreamAssessment],
    function_targets: Optional[dict[str, float]] = None,
) -> OverallScore:
    """Roll stream assessments up into the program-level score (0-3)."""
    total_streams = len(practices) * 2

    if not assessments:
        return OverallScore(total_streams=total_streams)

    practice_scores = calculate_practice_scores(practices, assessments)
    functions = calculate_business_function_scores(
        practices, practice_scores, function_targets
    )

    values = list(functions.values())
    overall = sum(f.score for f in values) / len(values) if values else 0.0
    overall_target = sum(f.target for f in values) / len(values) if values else 0.0

    return OverallScore(
        overall_score=overall,
        overall_target=overall_target,
        business_functions=functions,
        practice_scores={
            pid: PracticeRollup(current=s.score, target=s.target)
            for pid, s in practice_scores.items()
        },
        assessed_streams=len(assessments),
        total_streams=total_streams,
    )
