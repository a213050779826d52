"""Tests for CLI entry points."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from compass import __version__
from compass.cli.compass import compass_cli


class TestCompassCli:
    def test_version(self):
        result = CliRunner().invoke(compass_cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @patch("compass.core.runner.initialize_project")
    def test_init_subcommand(self, mock_init, tmp_path):
        project = tmp_path / "proj"
        project.mkdir()

        result = CliRunner().invoke(compass_cli, ["init", "-p", str(project)])
        assert result.exit_code == 0
        mock_init.assert_called_once()

    def test_init_requires_project(self):
        result = CliRunner().invoke(compass_cli, ["init"])
        assert result.exit_code == 2


class TestSammCli:
    @patch("compass.core.runner.run_samm_score", new_callable=AsyncMock)
    def test_score(self, mock_score, tmp_path):
        mock_score.return_value = 0
        result = CliRunner().invoke(
            compass_cli,
            ["samm", "score", "-p", str(tmp_path), "--client", "7", "--store", "http", "--endpoint", "https://x.test"],
        )
        assert result.exit_code == 0
        kwargs = mock_score.call_args.kwargs
        assert kwargs["client_id"] == 7
        assert kwargs["store_backend"] == "http"
        assert kwargs["endpoint"] == "https://x.test"

    @patch("compass.core.runner.run_samm_score", new_callable=AsyncMock)
    def test_score_exit_code_only_in_ci(self, mock_score, tmp_path):
        mock_score.return_value = 1
        assert CliRunner().invoke(compass_cli, ["samm", "score", "-p", str(tmp_path)]).exit_code == 0
        assert CliRunner().invoke(compass_cli, ["samm", "score", "-p", str(tmp_path), "--ci"]).exit_code == 1

    @patch("compass.core.runner.run_samm_score", new_callable=AsyncMock)
    def test_tool_errors_always_exit(self, mock_score, tmp_path):
        mock_score.return_value = 12
        assert CliRunner().invoke(compass_cli, ["samm", "score", "-p", str(tmp_path)]).exit_code == 12

    @patch("compass.core.runner.run_samm_update", new_callable=AsyncMock)
    def test_update_parses_levels(self, mock_update, tmp_path):
        mock_update.return_value = 0
        result = CliRunner().invoke(
            compass_cli,
            [
                "samm", "update", "SM", "A", "-p", str(tmp_path),
                "--achieved", "1,2", "--not-achieved", "3", "--target", "3",
                "--level-note", "3=Needs tooling",
            ],
        )
        assert result.exit_code == 0
        kwargs = mock_update.call_args.kwargs
        assert kwargs["practice_id"] == "SM"
        assert kwargs["achieved"] == [1, 2]
        assert kwargs["not_achieved"] == [3]
        assert kwargs["target"] == 3
        assert kwargs["level_notes"] == {3: "Needs tooling"}

    @patch("compass.core.runner.run_samm_update", new_callable=AsyncMock)
    def test_update_parses_quality(self, mock_update, tmp_path):
        mock_update.return_value = 0
        result = CliRunner().invoke(
            compass_cli,
            [
                "samm", "update", "SM", "A", "-p", str(tmp_path),
                "--quality", "2:0=yes", "--quality", "2:1=No", "--quality", "3:0=no",
            ],
        )
        assert result.exit_code == 0
        assert mock_update.call_args.kwargs["quality"] == {2: {0: True, 1: False}, 3: {0: False}}

    @patch("compass.core.runner.run_samm_update", new_callable=AsyncMock)
    def test_update_rejects_bad_quality(self, mock_update, tmp_path):
        for value in ("2=yes", "2:0=maybe", "x:0=yes"):
            result = CliRunner().invoke(
                compass_cli, ["samm", "update", "SM", "A", "-p", str(tmp_path), "--quality", value]
            )
            assert result.exit_code == 2
        mock_update.assert_not_called()

    def test_update_rejects_bad_levels(self, tmp_path):
        result = CliRunner().invoke(compass_cli, ["samm", "update", "SM", "A", "-p", str(tmp_path), "--achieved", "one"])
        assert result.exit_code != 0

    def test_update_target_range(self, tmp_path):
        result = CliRunner().invoke(compass_cli, ["samm", "update", "SM", "A", "-p", str(tmp_path), "--target", "4"])
        assert result.exit_code == 2

    @patch("compass.core.runner.run_samm_plan", new_callable=AsyncMock)
    def test_plan(self, mock_plan, tmp_path):
        mock_plan.return_value = 0
        result = CliRunner().invoke(compass_cli, ["samm", "plan", "-p", str(tmp_path)])
        assert result.exit_code == 0
        mock_plan.assert_called_once()


class TestSoc2Cli:
    @patch("compass.core.runner.write_soc2_template")
    def test_template(self, mock_template, tmp_path):
        result = CliRunner().invoke(compass_cli, ["soc2", "template", "-p", str(tmp_path)])
        assert result.exit_code == 0
        mock_template.assert_called_once()

    @patch("compass.core.runner.run_soc2_assess")
    def test_assess_ci(self, mock_assess, tmp_path):
        mock_assess.return_value = 2
        input_path = tmp_path / "input.yaml"
        input_path.write_text("organization: Acme\n", encoding="utf-8")

        result = CliRunner().invoke(
            compass_cli,
            ["soc2", "assess", "-p", str(tmp_path), "-i", str(input_path), "--ci", "--order", "priority"],
        )
        assert result.exit_code == 2
        assert mock_assess.call_args.kwargs["order"] == "priority"

    def test_assess_requires_input(self, tmp_path):
        result = CliRunner().invoke(compass_cli, ["soc2", "assess", "-p", str(tmp_path)])
        assert result.exit_code == 2
