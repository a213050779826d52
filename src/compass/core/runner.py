"""Command runners: load config, talk to the store, score, write reports."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from rich.console import Console

from .. import __version__
from ..client.base import ComplianceStore, StoreError, get_store
from ..formatters.junit import convert_readiness_to_junit, convert_samm_to_junit, export_junit_results
from ..samm.scoring import calculate_overall_score
from ..samm.session import StreamEditor
from ..soc2.catalog import build_initial_criteria
from ..soc2.readiness import ROADMAP_ORDERS
from ..soc2.wizard import ReadinessWizard
from ..utils.sanitize import sanitize_error
from .config import get_effective_config
from .report import export_json, generate_samm_report, generate_soc2_report, get_exit_code

console = Console()

EXIT_INVALID_INPUT = 11
EXIT_NOT_INITIALIZED = 12
EXIT_STORE_FAILURE = 13


def initialize_project(project_path: Path) -> None:
    """Initialize .compass directory structure in a project."""
    compass_dir = project_path / ".compass"
    (compass_dir / "reports").mkdir(parents=True, exist_ok=True)

    config_path = compass_dir / "config.yaml"
    if not config_path.exists():
        config_path.write_text(
            "# Compass project configuration\n"
            "\n"
            f"compass_version: \"{__version__}\"\n"
            "\n"
            "project:\n"
            f'  name: "{project_path.name}"\n'
            "\n"
            "store:\n"
            "  backend: local\n",
            encoding="utf-8",
        )

    console.print(f"  [green]Initialized[/green] .compass/ in {project_path.name}")


def _is_ci(ci: bool) -> bool:
    return ci or bool(
        os.environ.get("GITHUB_ACTIONS")
        or os.environ.get("TF_BUILD")
        or os.environ.get("CI")
        or os.environ.get("JENKINS_URL")
    )


def _prepare_project(project_path: Path, is_ci: bool) -> Optional[Path]:
    """Return the reports directory, or None if the project is not initialized."""
    compass_dir = project_path / ".compass"
    if not compass_dir.exists():
        if not is_ci:
            console.print("  [red]ERROR[/red] Project not initialized. Run: compass init -p <path>")
            return None
        initialize_project(project_path)

    reports_dir = compass_dir / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)
    return reports_dir


def _store_overrides(store_backend: Optional[str]) -> Optional[dict]:
    if store_backend:
        return {"store": {"backend": store_backend}}
    return None


def _open_store(
    config: dict,
    project_path: Path,
    store_backend: Optional[str],
    endpoint: Optional[str],
) -> Optional[ComplianceStore]:
    try:
        store = get_store(
            config,
            backend_override=store_backend,
            endpoint_override=endpoint,
            project_path=project_path,
        )
    except ValueError as e:
        console.print(f"  [red]ERROR[/red] Failed to initialize store: {e}")
        return None
    console.print(f"  [green]OK[/green] Store: {store.name}")
    return store


def _resolve_client_id(config: dict, client_id: Optional[int]) -> Optional[int]:
    return client_id if client_id is not None else config.get("client_id")


async def run_samm_score(
    project_path: Path,
    client_id: Optional[int] = None,
    output_format: str = "markdown",
    ci: bool = False,
    store_backend: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> int:
    """Score the SAMM program for a client and write reports. Returns exit code."""
    start_time = time.time()
    project_path = Path(project_path).resolve()
    is_ci = _is_ci(ci)

    reports_dir = _prepare_project(project_path, is_ci)
    if reports_dir is None:
        return EXIT_NOT_INITIALIZED

    config = get_effective_config(project_path, cli_overrides=_store_overrides(store_backend))
    client_id = _resolve_client_id(config, client_id)
    project_name = config.get("project", {}).get("name") or project_path.name

    console.print()
    console.print(f"  [bold cyan]COMPASS[/bold cyan] v{__version__} - SAMM v2")
    console.print(f"  Project: [white]{project_name}[/white]")
    console.print()

    store = _open_store(config, project_path, store_backend, endpoint)
    if store is None:
        return EXIT_STORE_FAILURE

    try:
        practices = await store.get_practices(client_id)
        assessments = await store.get_assessments(client_id)
    except StoreError as e:
        console.print(f"  [red]ERROR[/red] {sanitize_error(str(e))}")
        return EXIT_STORE_FAILURE

    # Always scored locally from raw answers
    function_targets = config.get("samm", {}).get("function_targets") or None
    overall = calculate_overall_score(practices, assessments, function_targets)

    report = generate_samm_report(
        overall, practices, assessments, project_name=project_name, store=store.name
    )
    (reports_dir / "SAMM-MATURITY-REPORT.md").write_text(report, encoding="utf-8")
    export_json(overall, reports_dir / "samm-score.json")

    if output_format == "junit" or is_ci:
        junit_result = export_junit_results(
            convert_samm_to_junit(practices, assessments),
            reports_dir / "samm-results.xml",
            project_name=project_name,
            duration=time.time() - start_time,
        )
        console.print(
            f"  [green]OK[/green] JUnit XML: {junit_result['total_tests']} streams, "
            f"{junit_result['failures']} below target"
        )

    if output_format == "json":
        console.print_json(overall.model_dump_json(by_alias=True))

    console.print(
        f"\n  [cyan]Overall maturity: {overall.overall_score:.1f} / 3.0[/cyan] "
        f"(target {overall.overall_target:.1f}, "
        f"{overall.assessed_streams}/{overall.total_streams} streams assessed)"
    )
    console.print(f"  Results: {reports_dir}")
    console.print()
    return 0


async def run_samm_update(
    project_path: Path,
    practice_id: str,
    stream_id: str,
    achieved: Optional[list[int]] = None,
    not_achieved: Optional[list[int]] = None,
    target: Optional[int] = None,
    notes: Optional[str] = None,
    level_notes: Optional[dict[int, str]] = None,
    quality: Optional[dict[int, dict[int, bool]]] = None,
    client_id: Optional[int] = None,
    store_backend: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> int:
    """Load one stream assessment, apply edits and save it as a full record."""
    project_path = Path(project_path).resolve()
    if _prepare_project(project_path, is_ci=False) is None:
        return EXIT_NOT_INITIALIZED

    config = get_effective_config(project_path, cli_overrides=_store_overrides(store_backend))
    client_id = _resolve_client_id(config, client_id)

    store = _open_store(config, project_path, store_backend, endpoint)
    if store is None:
        return EXIT_STORE_FAILURE

    try:
        practices = await store.get_practices(client_id)
        assessments = await store.get_assessments(client_id)
    except StoreError as e:
        console.print(f"  [red]ERROR[/red] {sanitize_error(str(e))}")
        return EXIT_STORE_FAILURE

    editor = StreamEditor.from_assessments(
        client_id,
        practice_id.upper(),
        stream_id.upper(),
        assessments,
        known_practices=[p.practice_id for p in practices],
    )
    for level in achieved or []:
        editor.toggle_answer(level, True)
    for level in not_achieved or []:
        editor.toggle_answer(level, False)
    for level, text in (level_notes or {}).items():
        editor.set_level_note(level, text)
    for level, items in (quality or {}).items():
        for index, value in items.items():
            editor.toggle_quality(level, index, value)
    if target is not None:
        editor.set_target(target)
    if notes is not None:
        editor.set_notes(notes)

    errors = editor.validate()
    if errors:
        for error in errors:
            console.print(f"  [red]ERROR[/red] {error}")
        return EXIT_INVALID_INPUT

    result = await editor.save(store)
    if not result.success:
        console.print(f"  [red]FAILED[/red] Save rejected: {result.error}")
        console.print("  [yellow]WARN[/yellow] Changes were not saved; re-run to retry.")
        return EXIT_STORE_FAILURE

    console.print(
        f"  [green]OK[/green] {editor.practice_id}-{editor.stream_id} {result.action}: "
        f"maturity {editor.calculated_maturity}, target {editor.target_level}"
    )
    return 0


async def run_samm_plan(
    project_path: Path,
    client_id: Optional[int] = None,
    store_backend: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> int:
    """Ask the store to generate an improvement plan for streams below target."""
    project_path = Path(project_path).resolve()
    if _prepare_project(project_path, is_ci=False) is None:
        return EXIT_NOT_INITIALIZED

    config = get_effective_config(project_path, cli_overrides=_store_overrides(store_backend))
    client_id = _resolve_client_id(config, client_id)

    store = _open_store(config, project_path, store_backend, endpoint)
    if store is None:
        return EXIT_STORE_FAILURE

    console.print("  [cyan]Building improvement plan...[/cyan]")
    result = await store.generate_improvement_plan(client_id)
    if not result.success:
        console.print(f"  [red]FAILED[/red] Failed to generate plan: {result.error}")
        return 1

    console.print(
        f"  [green]OK[/green] Generated plan {result.plan_id} with {result.task_count} tasks "
        f"({result.gaps} of {result.total_assessed} streams below target)"
    )
    return 0


def write_soc2_template(project_path: Path, output: Optional[Path] = None) -> Path:
    """Write a blank SOC 2 input document listing every catalog criterion."""
    project_path = Path(project_path).resolve()
    output = output or project_path / ".compass" / "soc2-assessment.yaml"

    document = {
        "organization": "",
        "type": "type2",
        "system_description": "",
        "service_description": "",
        "criteria": [
            c.model_dump(mode="json", exclude={"evidence"})
            for c in build_initial_criteria()
        ],
    }
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        yaml.safe_dump(document, default_flow_style=False, sort_keys=False, width=120),
        encoding="utf-8",
    )
    console.print(f"  [green]OK[/green] Wrote SOC 2 template: {output}")
    return output


def run_soc2_assess(
    project_path: Path,
    input_path: Path,
    output_format: str = "markdown",
    ci: bool = False,
    order: Optional[str] = None,
) -> int:
    """Score a SOC 2 readiness input document and write reports. Returns exit code."""
    start_time = time.time()
    project_path = Path(project_path).resolve()
    is_ci = _is_ci(ci)

    reports_dir = _prepare_project(project_path, is_ci)
    if reports_dir is None:
        return EXIT_NOT_INITIALIZED

    config = get_effective_config(project_path)
    soc2_config = config.get("soc2", {})
    order = order or soc2_config.get("roadmap_order", "source")
    if order not in ROADMAP_ORDERS:
        console.print(f"  [red]ERROR[/red] Unknown roadmap order: {order}")
        return EXIT_INVALID_INPUT

    try:
        document = yaml.safe_load(Path(input_path).read_text(encoding="utf-8-sig")) or {}
        if not isinstance(document, dict):
            raise ValueError("input must be a mapping")
        wizard = ReadinessWizard.from_dict(document)
    except (OSError, yaml.YAMLError, ValidationError, ValueError) as e:
        console.print(f"  [red]ERROR[/red] Invalid SOC 2 input: {e}")
        return EXIT_INVALID_INPUT

    if not wizard.organization:
        wizard.organization = config.get("project", {}).get("organization") or ""

    errors = wizard.validation_errors()
    if errors:
        for error in errors:
            console.print(f"  [red]ERROR[/red] {error}")
        return EXIT_INVALID_INPUT

    report = wizard.build_report(
        target_score=int(soc2_config.get("target_score", 80)),
        order=order,
        interval_months=int(soc2_config.get("roadmap_interval_months", 2)),
    )

    console.print()
    console.print(f"  [bold cyan]COMPASS[/bold cyan] v{__version__} - SOC 2 Readiness")
    console.print(f"  Organization: [white]{report.organization}[/white]")
    console.print(f"  Criteria:     [white]{len(report.trust_criteria)}[/white]")
    console.print()

    (reports_dir / "SOC2-READINESS-REPORT.md").write_text(
        generate_soc2_report(report), encoding="utf-8"
    )
    export_json(report, reports_dir / "soc2-readiness.json")

    if output_format == "junit" or is_ci:
        junit_result = export_junit_results(
            convert_readiness_to_junit(report),
            reports_dir / "soc2-results.xml",
            project_name=report.organization or "Compass",
            duration=time.time() - start_time,
        )
        console.print(
            f"  [green]OK[/green] JUnit XML: {junit_result['total_tests']} criteria, "
            f"{junit_result['failures']} gaps"
        )

    if output_format == "json":
        console.print_json(report.model_dump_json(by_alias=True))

    status_colors = {"Audit Ready": "green", "Ready for Review": "yellow", "Needs Improvement": "red"}
    color = status_colors.get(report.status.value, "white")
    console.print(
        f"\n  [{color}]Readiness: {report.readiness_score}% - {report.status.value}[/{color}]"
    )
    console.print(f"  Gaps: {len(report.gaps)}  Milestones: {len(report.roadmap)}")
    console.print(f"  Results: {reports_dir}")
    console.print()

    exit_code = get_exit_code(report.status, config.get("ci", {}).get("exit_codes"))
    if is_ci:
        console.print(f"  CI Mode: Exiting with code {exit_code}")
    return exit_code
