"""Compass - SAMM v2 maturity scoring and SOC 2 readiness assessment."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from .. import __version__

BACKEND_CHOICES = click.Choice(["local", "http"])
FORMAT_CHOICES = click.Choice(["markdown", "json", "junit"])


def _parse_levels(value: str | None) -> list[int]:
    if not value:
        return []
    try:
        return [int(v.strip()) for v in value.split(",") if v.strip()]
    except ValueError:
        raise click.BadParameter(f"Expected comma-separated levels, got {value!r}") from None


def _parse_level_notes(values: tuple[str, ...]) -> dict[int, str]:
    notes: dict[int, str] = {}
    for item in values:
        level, sep, text = item.partition("=")
        if not sep or not level.strip().isdigit():
            raise click.BadParameter(f"Expected LEVEL=TEXT, got {item!r}")
        notes[int(level)] = text
    return notes


def _parse_quality(values: tuple[str, ...]) -> dict[int, dict[int, bool]]:
    quality: dict[int, dict[int, bool]] = {}
    for item in values:
        key, sep, answer = item.partition("=")
        level, colon, index = key.partition(":")
        answer = answer.strip().lower()
        if (
            not sep
            or not colon
            or not level.strip().isdigit()
            or not index.strip().isdigit()
            or answer not in ("yes", "no")
        ):
            raise click.BadParameter(f"Expected LEVEL:INDEX=yes|no, got {item!r}")
        quality.setdefault(int(level), {})[int(index)] = answer == "yes"
    return quality


def _finish(exit_code: int, ci: bool = False) -> None:
    # Codes 10+ signal tool errors and always propagate
    if ci or exit_code >= 10:
        sys.exit(exit_code)


@click.group()
@click.version_option(version=__version__, prog_name="compass")
def compass_cli() -> None:
    """Compass - OWASP SAMM v2 maturity and SOC 2 readiness scoring."""


@compass_cli.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
def init(project: str) -> None:
    """Initialize Compass in a project."""
    from ..core.runner import initialize_project

    initialize_project(Path(project))


@compass_cli.group()
def samm() -> None:
    """OWASP SAMM v2 stream assessments."""


@samm.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.option("--client", "client_id", type=int, help="Client ID (defaults to config client_id)")
@click.option("--output-format", "-f", type=FORMAT_CHOICES, default="markdown")
@click.option("--ci", is_flag=True, help="CI mode: enable exit codes")
@click.option("--store", "store_backend", type=BACKEND_CHOICES, help="Store backend override")
@click.option("--endpoint", type=str, help="HTTP store endpoint override")
def score(
    project: str,
    client_id: int | None,
    output_format: str,
    ci: bool,
    store_backend: str | None,
    endpoint: str | None,
) -> None:
    """Score maturity per practice, business function and overall."""
    from ..core.runner import run_samm_score

    exit_code = asyncio.run(
        run_samm_score(
            project_path=Path(project),
            client_id=client_id,
            output_format=output_format,
            ci=ci,
            store_backend=store_backend,
            endpoint=endpoint,
        )
    )
    _finish(exit_code, ci)


@samm.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.argument("practice_id")
@click.argument("stream_id")
@click.option("--achieved", type=str, help="Comma-separated levels answered yes, e.g. 1,2")
@click.option("--not-achieved", type=str, help="Comma-separated levels answered no")
@click.option("--target", type=click.IntRange(1, 3), help="Target maturity level")
@click.option("--notes", type=str, help="Free-form notes for the stream")
@click.option("--level-note", multiple=True, help="Per-level note as LEVEL=TEXT")
@click.option("--quality", multiple=True, help="Quality criterion check as LEVEL:INDEX=yes|no")
@click.option("--client", "client_id", type=int, help="Client ID (defaults to config client_id)")
@click.option("--store", "store_backend", type=BACKEND_CHOICES, help="Store backend override")
@click.option("--endpoint", type=str, help="HTTP store endpoint override")
def update(
    project: str,
    practice_id: str,
    stream_id: str,
    achieved: str | None,
    not_achieved: str | None,
    target: int | None,
    notes: str | None,
    level_note: tuple[str, ...],
    quality: tuple[str, ...],
    client_id: int | None,
    store_backend: str | None,
    endpoint: str | None,
) -> None:
    """Record answers for one practice stream.

    Example: compass samm update SM A -p ./repo --achieved 1,2 --target 3
    """
    from ..core.runner import run_samm_update

    exit_code = asyncio.run(
        run_samm_update(
            project_path=Path(project),
            practice_id=practice_id,
            stream_id=stream_id,
            achieved=_parse_levels(achieved),
            not_achieved=_parse_levels(not_achieved),
            target=target,
            notes=notes,
            level_notes=_parse_level_notes(level_note),
            quality=_parse_quality(quality),
            client_id=client_id,
            store_backend=store_backend,
            endpoint=endpoint,
        )
    )
    _finish(exit_code)


@samm.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.option("--client", "client_id", type=int, help="Client ID (defaults to config client_id)")
@click.option("--store", "store_backend", type=BACKEND_CHOICES, help="Store backend override")
@click.option("--endpoint", type=str, help="HTTP store endpoint override")
def plan(
    project: str,
    client_id: int | None,
    store_backend: str | None,
    endpoint: str | None,
) -> None:
    """Generate an improvement plan for streams below target."""
    from ..core.runner import run_samm_plan

    exit_code = asyncio.run(
        run_samm_plan(
            project_path=Path(project),
            client_id=client_id,
            store_backend=store_backend,
            endpoint=endpoint,
        )
    )
    _finish(exit_code)


@compass_cli.group()
def soc2() -> None:
    """SOC 2 readiness assessment."""


@soc2.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.option("--output", "-o", type=click.Path(), help="Where to write the template")
def template(project: str, output: str | None) -> None:
    """Write a blank assessment listing every trust services criterion."""
    from ..core.runner import write_soc2_template

    write_soc2_template(Path(project), Path(output) if output else None)


@soc2.command()
@click.option("--project", "-p", type=click.Path(exists=True), required=True)
@click.option("--input", "-i", "input_path", type=click.Path(exists=True), required=True)
@click.option("--output-format", "-f", type=FORMAT_CHOICES, default="markdown")
@click.option("--ci", is_flag=True, help="CI mode: enable exit codes")
@click.option("--order", type=click.Choice(["source", "priority"]), help="Roadmap ordering")
def assess(
    project: str,
    input_path: str,
    output_format: str,
    ci: bool,
    order: str | None,
) -> None:
    """Score readiness, analyze gaps and build a roadmap."""
    from ..core.runner import run_soc2_assess

    exit_code = run_soc2_assess(
        project_path=Path(project),
        input_path=Path(input_path),
        output_format=output_format,
        ci=ci,
        order=order,
    )
    _finish(exit_code, ci)


def main() -> None:
    compass_cli()


if __name__ == "__main__":
    main()
