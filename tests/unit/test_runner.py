"""Tests for core/runner.py."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from compass.client.base import StoreError
from compass.core.runner import (
    EXIT_INVALID_INPUT,
    EXIT_NOT_INITIALIZED,
    EXIT_STORE_FAILURE,
    initialize_project,
    run_samm_plan,
    run_samm_score,
    run_samm_update,
    run_soc2_assess,
    write_soc2_template,
)
from compass.models.samm import StreamAssessment


@pytest.fixture(autouse=True)
def _no_ci_env(monkeypatch):
    for var in ("GITHUB_ACTIONS", "TF_BUILD", "CI", "JENKINS_URL"):
        monkeypatch.delenv(var, raising=False)


class TestInitializeProject:
    def test_creates_structure(self, tmp_project: Path):
        initialize_project(tmp_project)
        assert (tmp_project / ".compass" / "reports").is_dir()
        config = yaml.safe_load((tmp_project / ".compass" / "config.yaml").read_text(encoding="utf-8"))
        assert config["project"]["name"] == "test-project"
        assert config["store"]["backend"] == "local"

    def test_keeps_existing_config(self, initialized_project: Path):
        initialize_project(initialized_project)
        content = (initialized_project / ".compass" / "config.yaml").read_text(encoding="utf-8")
        assert "Acme" in content


class TestSammRunners:
    @pytest.mark.asyncio
    async def test_not_initialized(self, tmp_project: Path):
        assert await run_samm_score(tmp_project) == EXIT_NOT_INITIALIZED

    @pytest.mark.asyncio
    async def test_update_then_score(self, initialized_project: Path):
        code = await run_samm_update(initialized_project, "sm", "a", achieved=[1, 2], target=3)
        assert code == 0

        code = await run_samm_score(initialized_project, output_format="junit")
        assert code == 0
        reports = initialized_project / ".compass" / "reports"
        assert "SM Strategy & Metrics" in (reports / "SAMM-MATURITY-REPORT.md").read_text(encoding="utf-8")
        score = json.loads((reports / "samm-score.json").read_text(encoding="utf-8"))
        assert score["assessedStreams"] == 1
        assert score["totalStreams"] == 30
        assert (reports / "samm-results.xml").exists()

    @pytest.mark.asyncio
    async def test_update_rejects_invalid_level(self, initialized_project: Path):
        code = await run_samm_update(initialized_project, "SM", "A", achieved=[4])
        assert code == EXIT_INVALID_INPUT

    @pytest.mark.asyncio
    async def test_update_merges_with_existing(self, initialized_project: Path):
        await run_samm_update(initialized_project, "SM", "A", achieved=[1], notes="kickoff")
        await run_samm_update(initialized_project, "SM", "A", achieved=[2])
        store = yaml.safe_load(
            (initialized_project / ".compass" / "samm-store.yaml").read_text(encoding="utf-8")
        )
        record = store["assessments"][0]
        assert record["notes"] == "kickoff"
        assert record["maturityLevel"] == 2

    @pytest.mark.asyncio
    async def test_update_rejects_unknown_practice(self, initialized_project: Path):
        code = await run_samm_update(initialized_project, "ZZ", "A", achieved=[1])
        assert code == EXIT_INVALID_INPUT
        assert not (initialized_project / ".compass" / "samm-store.yaml").exists()

    @pytest.mark.asyncio
    async def test_update_quality_and_report(self, initialized_project: Path):
        code = await run_samm_update(
            initialized_project,
            "SM",
            "A",
            achieved=[1],
            quality={1: {0: True, 1: False}},
            level_notes={1: "Charter signed"},
        )
        assert code == 0
        store = yaml.safe_load(
            (initialized_project / ".compass" / "samm-store.yaml").read_text(encoding="utf-8")
        )
        record = StreamAssessment.model_validate(store["assessments"][0])
        assert record.quality_criteria == {1: {0: True, 1: False}}

        assert await run_samm_score(initialized_project) == 0
        report = (initialized_project / ".compass" / "reports" / "SAMM-MATURITY-REPORT.md").read_text(
            encoding="utf-8"
        )
        assert "### SM-A" in report
        assert "- Level 1 quality: 1/2 criteria met" in report
        assert "- Level 1 notes: Charter signed" in report

    @pytest.mark.asyncio
    async def test_plan(self, initialized_project: Path):
        await run_samm_update(initialized_project, "SM", "A", achieved=[1], target=2)
        assert await run_samm_plan(initialized_project) == 0

    @pytest.mark.asyncio
    async def test_plan_without_gaps(self, initialized_project: Path):
        await run_samm_update(initialized_project, "SM", "A", achieved=[1], target=1)
        assert await run_samm_plan(initialized_project) == 1

    @pytest.mark.asyncio
    async def test_store_failure(self, initialized_project: Path):
        store = AsyncMock()
        store.name = "http"
        store.get_practices.side_effect = StoreError("getPractices failed: 503 | down")
        with patch("compass.core.runner.get_store", return_value=store):
            assert await run_samm_score(initialized_project) == EXIT_STORE_FAILURE

    @pytest.mark.asyncio
    async def test_unknown_backend(self, initialized_project: Path):
        config_path = initialized_project / ".compass" / "config.yaml"
        config_path.write_text("store:\n  backend: sqlite\n", encoding="utf-8")
        assert await run_samm_score(initialized_project) == EXIT_STORE_FAILURE


def _write_input(project: Path, implemented: int, maturity: str = "optimized") -> Path:
    template = write_soc2_template(project)
    document = yaml.safe_load(template.read_text(encoding="utf-8"))
    document["organization"] = "Acme"
    for item in document["criteria"][:implemented]:
        item["implemented"] = True
        item["maturity"] = maturity
    template.write_text(yaml.safe_dump(document), encoding="utf-8")
    return template


class TestSoc2Runner:
    def test_template(self, initialized_project: Path):
        path = write_soc2_template(initialized_project)
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert len(document["criteria"]) == 12
        assert document["type"] == "type2"

    def test_assess_writes_reports(self, initialized_project: Path):
        input_path = _write_input(initialized_project, implemented=12)
        code = run_soc2_assess(initialized_project, input_path, output_format="junit")
        assert code == 0
        reports = initialized_project / ".compass" / "reports"
        data = json.loads((reports / "soc2-readiness.json").read_text(encoding="utf-8"))
        assert data["readinessScore"] == 100
        assert data["status"] == "Audit Ready"
        assert (reports / "SOC2-READINESS-REPORT.md").exists()
        assert (reports / "soc2-results.xml").exists()

    def test_status_exit_code(self, initialized_project: Path):
        input_path = _write_input(initialized_project, implemented=1, maturity="initial")
        assert run_soc2_assess(initialized_project, input_path, ci=True) == 1

    def test_nothing_implemented_is_invalid(self, initialized_project: Path):
        input_path = _write_input(initialized_project, implemented=0)
        assert run_soc2_assess(initialized_project, input_path) == EXIT_INVALID_INPUT

    def test_organization_from_config(self, initialized_project: Path):
        input_path = _write_input(initialized_project, implemented=12)
        document = yaml.safe_load(input_path.read_text(encoding="utf-8"))
        document["organization"] = ""
        input_path.write_text(yaml.safe_dump(document), encoding="utf-8")
        assert run_soc2_assess(initialized_project, input_path) == 0

    def test_malformed_input(self, initialized_project: Path):
        bad = initialized_project / "bad.yaml"
        bad.write_text("criteria:\n  - id: x\n", encoding="utf-8")
        assert run_soc2_assess(initialized_project, bad) == EXIT_INVALID_INPUT

    def test_unknown_order(self, initialized_project: Path):
        input_path = _write_input(initialized_project, implemented=12)
        assert run_soc2_assess(initialized_project, input_path, order="alpha") == EXIT_INVALID_INPUT
