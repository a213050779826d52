"""Tests for samm/planning.py."""

from __future__ import annotations

import pytest

from compass.models.samm import StreamQuestion
from compass.samm.planning import (
    PlanningError,
    build_improvement_tasks,
    generate_improvement_plan,
    identify_stream_gaps,
)


def _question(level: int = 3) -> StreamQuestion:
    return StreamQuestion(
        practice_id="SM",
        stream_id="A",
        stream_name="Create and Promote",
        level=level,
        question="Is the security program reviewed against business goals?",
        quality_criteria=["Reviewed annually", "Signed off by leadership"],
        activities=["Define KPIs", "Publish roadmap"],
    )


class TestIdentifyStreamGaps:
    def test_below_target_only(self, assessments):
        gaps = identify_stream_gaps(assessments)
        assert [(g.practice_id, g.stream_id) for g in gaps] == [("SM", "A"), ("SM", "B")]

    def test_uses_derived_maturity(self, make_assessment):
        stale = make_assessment("SM", "A", {1: True}, target=2, maturity_level=3)
        assert identify_stream_gaps([stale]) == [stale]


class TestBuildImprovementTasks:
    def test_task_fields(self, make_assessment):
        gap = make_assessment("SM", "A", {1: True}, target=2)
        task = build_improvement_tasks([gap])[0]
        assert task.title == "SM-A: Improve to Level 2"
        assert task.current_level == 1
        assert task.target_level == 2
        assert task.priority == "medium"
        assert task.status == "backlog"
        assert task.pdca == "Plan"
        assert task.tags == ["SM", "A", "SAMM-v2", "L2"]

    def test_high_priority_for_large_gap(self, make_assessment):
        gap = make_assessment("SM", "B", {}, target=3)
        assert build_improvement_tasks([gap])[0].priority == "high"

    def test_generic_description_without_question(self, make_assessment):
        gap = make_assessment("SM", "A", {}, target=1)
        description = build_improvement_tasks([gap])[0].description
        assert "**Current Level:** 0 | **Target:** 1 | **Gap:** 1 level(s)" in description
        assert "Review SAMM practice requirements" in description

    def test_question_details(self, make_assessment):
        gap = make_assessment("SM", "A", {1: True, 2: True}, target=3, notes="Board asked for it")
        description = build_improvement_tasks([gap], [_question(level=3)])[0].description
        assert "**Question:** Is the security program" in description
        assert "1. Define KPIs" in description
        assert "- [ ] Reviewed annually" in description
        assert "**General Notes:** Board asked for it" in description

    def test_question_at_other_level_ignored(self, make_assessment):
        gap = make_assessment("SM", "A", {1: True}, target=2)
        description = build_improvement_tasks([gap], [_question(level=3)])[0].description
        assert "**Question:**" not in description

    def test_level_notes_appended(self, make_assessment):
        gap = make_assessment("SM", "A", {}, target=2, level_notes={2: "No metrics yet", 1: "  "})
        description = build_improvement_tasks([gap])[0].description
        assert "**Assessment Level Findings:**" in description
        assert "**Level 2 Notes:** No metrics yet" in description
        assert "Level 1 Notes" not in description


class TestGenerateImprovementPlan:
    def test_plan_summary(self, assessments):
        plan = generate_improvement_plan(7, assessments, plan_id=4)
        assert plan.plan_id == 4
        assert plan.client_id == 7
        assert plan.gaps == 2
        assert plan.total_assessed == 3
        assert len(plan.tasks) == 2
        assert plan.title == "SAMM v2 Improvement Plan"
        assert plan.status == "planning"
        assert "2 streams identified for improvement out of 3 assessed streams" in plan.description

    def test_no_assessments(self):
        with pytest.raises(PlanningError) as exc_info:
            generate_improvement_plan(7, [])
        assert exc_info.value.code == "NOT_FOUND"

    def test_no_gaps(self, make_assessment):
        done = [make_assessment("SM", "A", {1: True, 2: True}, target=2)]
        with pytest.raises(PlanningError) as exc_info:
            generate_improvement_plan(7, done)
        assert exc_info.value.code == "BAD_REQUEST"
