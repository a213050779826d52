"""Shared fixtures for Compass tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from compass.models.samm import Practice, StreamAssessment
from compass.models.soc2 import MaturityLevel
from compass.soc2.catalog import build_initial_criteria


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create an empty project directory."""
    project = tmp_path / "test-project"
    project.mkdir()
    (project / "README.md").write_text("# Test Project\n", encoding="utf-8")
    return project


@pytest.fixture
def initialized_project(tmp_project: Path) -> Path:
    """Create a project with .compass initialized."""
    compass_dir = tmp_project / ".compass"
    compass_dir.mkdir()
    (compass_dir / "reports").mkdir()

    config = compass_dir / "config.yaml"
    config.write_text(
        'project:\n  name: "test-project"\n  organization: "Acme"\n\n'
        "client_id: 7\n\nstore:\n  backend: local\n",
        encoding="utf-8",
    )
    return tmp_project


@pytest.fixture
def practices() -> list[Practice]:
    """Two practices in two business functions."""
    return [
        Practice(
            practice_id="SM",
            practice_name="Strategy & Metrics",
            business_function="Governance",
            stream_a_name="Create and Promote",
            stream_b_name="Measure and Improve",
            order=1,
        ),
        Practice(
            practice_id="TA",
            practice_name="Threat Assessment",
            business_function="Design",
            stream_a_name="Application Risk Profile",
            stream_b_name="Threat Modeling",
            order=4,
        ),
    ]


def _make_assessment(
    practice_id: str,
    stream_id: str,
    answers: dict,
    target: int = 1,
    client_id: int = 7,
    **kwargs,
) -> StreamAssessment:
    return StreamAssessment(
        client_id=client_id,
        practice_id=practice_id,
        stream_id=stream_id,
        assessment_answers=answers,
        target_level=target,
        **kwargs,
    )


@pytest.fixture
def assessments() -> list[StreamAssessment]:
    """SM-A at level 2 (target 3), SM-B at level 0, TA-A at level 3."""
    return [
        _make_assessment("SM", "A", {1: True, 2: True, 3: False}, target=3),
        _make_assessment("SM", "B", {1: False, 2: True}, target=1),
        _make_assessment("TA", "A", {1: True, 2: True, 3: True}, target=2),
    ]


@pytest.fixture
def criteria():
    """Catalog criteria with security-0 managed/implemented and availability-0 initial."""
    items = build_initial_criteria()
    items[0] = items[0].model_copy(update={"implemented": True, "maturity": MaturityLevel.MANAGED})
    items[3] = items[3].model_copy(update={"implemented": True, "maturity": MaturityLevel.INITIAL})
    return items


@pytest.fixture
def make_assessment():
    """Factory for stream assessments owned by client 7."""
    return _make_assessment
