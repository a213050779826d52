"""Markdown and JSON report generation, plus CI exit codes."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from .. import __version__
from ..models.samm import BUSINESS_FUNCTIONS, OverallScore, Practice, StreamAssessment
from ..models.soc2 import MATURITY_LABELS, ReadinessReport, ReadinessStatus
from ..samm.scoring import calculate_practice_scores, get_practice_status, index_assessments, stream_maturity
from ..soc2.readiness import get_milestone_progress

DEFAULT_EXIT_CODES = {"audit_ready": 0, "ready_for_review": 2, "needs_improvement": 1}


def get_exit_code(status: ReadinessStatus, exit_codes: Optional[dict] = None) -> int:
    """Map readiness status to exit code."""
    codes = {**DEFAULT_EXIT_CODES, **(exit_codes or {})}
    return {
        ReadinessStatus.AUDIT_READY: codes["audit_ready"],
        ReadinessStatus.READY_FOR_REVIEW: codes["ready_for_review"],
        ReadinessStatus.NEEDS_IMPROVEMENT: codes["needs_improvement"],
    }.get(status, 0)


def export_json(model: BaseModel, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(model.model_dump(mode="json", by_alias=True), indent=2),
        encoding="utf-8",
    )
    return output_path


def generate_samm_report(
    overall: OverallScore,
    practices: list[Practice],
    assessments: list[StreamAssessment],
    project_name: str = "",
    store: str = "",
) -> str:
    """Generate SAMM-MATURITY-REPORT.md."""
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    practice_scores = calculate_practice_scores(practices, assessments)
    by_stream = index_assessments(assessments)

    lines: list[str] = []
    lines.append("# SAMM v2 Maturity Report")
    lines.append("")
    if project_name:
        lines.append(f"**Project:** {project_name}")
    lines.append(f"**Date:** {timestamp}")
    if store:
        lines.append(f"**Store:** {store}")
    lines.append(f"**Overall Maturity:** {overall.overall_score:.1f} / 3.0")
    lines.append(f"**Overall Target:** {overall.overall_target:.1f}")
    lines.append(f"**Assessed Streams:** {overall.assessed_streams}/{overall.total_streams}")
    lines.append("")

    lines.append("## Business Functions")
    lines.append("")
    lines.append("| Function | Score | Target |")
    lines.append("|----------|-------|--------|")
    known = [f for f in BUSINESS_FUNCTIONS if f in overall.business_functions]
    extra = [f for f in overall.business_functions if f not in BUSINESS_FUNCTIONS]
    for function in known + extra:
        score = overall.business_functions[function]
        lines.append(f"| {function} | {score.score:.1f} | {score.target:.1f} |")
    lines.append("")

    lines.append("## Practices")
    lines.append("")
    lines.append("| Practice | Function | Stream A | Stream B | Score | Status |")
    lines.append("|----------|----------|----------|----------|-------|--------|")
    for practice in practices:
        score = practice_scores[practice.practice_id]
        level_a = stream_maturity(by_stream.get((practice.practice_id, "A")))
        level_b = stream_maturity(by_stream.get((practice.practice_id, "B")))
        lines.append(
            f"| {practice.practice_id} {practice.practice_name} | {practice.business_function} "
            f"| {level_a} | {level_b} | {score.score:.1f} | {get_practice_status(score.score)} |"
        )
    lines.append("")

    gaps = [
        a for a in assessments if stream_maturity(a) < a.target_level
    ]
    if gaps:
        lines.append("## Streams Below Target")
        lines.append("")
        for a in gaps:
            lines.append(
                f"- **{a.practice_id}-{a.stream_id}**: level {stream_maturity(a)}, "
                f"target {a.target_level}"
            )
        lines.append("")

    detailed = [a for a in assessments if a.quality_criteria or a.level_notes]
    if detailed:
        lines.append("## Stream Details")
        lines.append("")
        for a in detailed:
            lines.append(f"### {a.practice_id}-{a.stream_id}")
            lines.append("")
            for level in sorted(set(a.quality_criteria) | set(a.level_notes)):
                items = a.quality_criteria.get(level)
                if items:
                    checked = sum(1 for value in items.values() if value)
                    lines.append(f"- Level {level} quality: {checked}/{len(items)} criteria met")
                if a.level_notes.get(level):
                    lines.append(f"- Level {level} notes: {a.level_notes[level]}")
            lines.append("")

    lines.append("---")
    lines.append(f"*Generated by Compass v{__version__} at {timestamp}*")

    return "\n".join(lines)


def generate_soc2_report(report: ReadinessReport) -> str:
    """Generate SOC2-READINESS-REPORT.md."""
    lines: list[str] = []
    lines.append("# SOC 2 Readiness Report")
    lines.append("")
    if report.organization:
        lines.append(f"**Organization:** {report.organization}")
    lines.append(f"**Report Type:** {report.soc2_type.value.replace('type', 'Type ')}")
    lines.append(f"**Date:** {report.last_updated}")
    lines.append(f"**Readiness Score:** {report.readiness_score}% (target {report.target_score}%)")
    lines.append(f"**Status:** {report.status.value}")
    lines.append("")

    if report.system_description:
        lines.append("## System Description")
        lines.append("")
        lines.append(report.system_description)
        lines.append("")

    lines.append("## Trust Services Criteria")
    lines.append("")
    lines.append("| Principle | Criteria | Implemented | Maturity |")
    lines.append("|-----------|----------|-------------|----------|")
    for c in report.trust_criteria:
        implemented = "Yes" if c.implemented else "No"
        lines.append(f"| {c.principle} | {c.criteria} | {implemented} | {MATURITY_LABELS[c.maturity]} |")
    lines.append("")

    lines.append("## Gap Analysis")
    lines.append("")
    if report.gaps:
        lines.append("| Principle | Criteria | Gap | Priority | Effort |")
        lines.append("|-----------|----------|-----|----------|--------|")
        for g in report.gaps:
            lines.append(f"| {g.principle} | {g.criteria} | {g.gap} | {g.priority} | {g.effort} |")
    else:
        lines.append("No gaps identified.")
    lines.append("")

    if report.roadmap:
        lines.append("## Implementation Roadmap")
        lines.append("")
        lines.append("| Milestone | Target Date | Priority | Depends On | Progress |")
        lines.append("|-----------|-------------|----------|------------|----------|")
        for m in report.roadmap:
            deps = ", ".join(m.dependencies) or "-"
            progress = get_milestone_progress(m.status)
            lines.append(
                f"| {m.title}: {m.description} | {m.target_date} | {m.priority} | {deps} | {progress}% |"
            )
        lines.append("")

    lines.append("## Recommendations")
    lines.append("")
    for rec in report.recommendations:
        lines.append(f"- {rec}")
    lines.append("")

    lines.append("---")
    lines.append(f"*Generated by Compass v{__version__} at {report.last_updated}*")

    return "\n".join(lines)
