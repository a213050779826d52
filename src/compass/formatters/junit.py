"""JUnit XML formatter for CI/CD integration.

Each SOC 2 criterion or SAMM stream becomes a testcase; gaps are failures.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from xml.dom import minidom
from xml.etree import ElementTree as ET

from ..models.samm import Practice, StreamAssessment
from ..models.soc2 import MATURITY_LABELS, ReadinessReport
from ..samm.scoring import index_assessments, stream_maturity


def export_junit_results(
    suites: dict[str, list[dict]],
    output_path: Path,
    project_name: str = "Compass",
    duration: float = 0,
) -> dict:
    """Export testcases as JUnit XML.

    Args:
        suites: Dict of suite name -> list of case dicts. Each case has:
            name, classname, and optionally failure (message, type, text)
            or skipped (message).
        output_path: Path to write the XML file.
        project_name: Name for the testsuites element.
        duration: Total duration in seconds.

    Returns:
        Dict with: path, total_tests, failures, skipped, passed.
    """
    testsuites = ET.Element("testsuites")
    testsuites.set("name", project_name)
    testsuites.set("timestamp", datetime.now().strftime("%Y-%m-%dT%H:%M:%S"))

    total_tests = 0
    total_failures = 0
    total_skipped = 0

    for suite_name, cases in suites.items():
        if not cases:
            continue

        testsuite = ET.SubElement(testsuites, "testsuite")
        testsuite.set("name", suite_name)
        testsuite.set("tests", str(len(cases)))

        suite_failures = 0
        suite_skipped = 0

        for case in cases:
            total_tests += 1

            testcase = ET.SubElement(testsuite, "testcase")
            testcase.set("name", case.get("name", "?"))
            testcase.set("classname", case.get("classname", suite_name))

            if case.get("failure"):
                total_failures += 1
                suite_failures += 1
                info = case["failure"]
                failure = ET.SubElement(testcase, "failure")
                failure.set("message", info.get("message", ""))
                failure.set("type", info.get("type", "gap"))
                failure.text = info.get("text", "")
            elif case.get("skipped"):
                total_skipped += 1
                suite_skipped += 1
                skipped = ET.SubElement(testcase, "skipped")
                skipped.set("message", case["skipped"])

        testsuite.set("failures", str(suite_failures))
        testsuite.set("errors", "0")
        testsuite.set("skipped", str(suite_skipped))

    testsuites.set("tests", str(total_tests))
    testsuites.set("failures", str(total_failures))
    testsuites.set("errors", "0")
    if duration > 0:
        testsuites.set("time", str(round(duration, 2)))

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Pretty-print XML
    rough = ET.tostring(testsuites, encoding="unicode")
    dom = minidom.parseString(rough)
    xml_str = dom.toprettyxml(indent="  ", encoding="UTF-8")
    output_path.write_bytes(xml_str)

    return {
        "path": str(output_path),
        "total_tests": total_tests,
        "failures": total_failures,
        "skipped": total_skipped,
        "passed": total_tests - total_failures - total_skipped,
    }


def convert_readiness_to_junit(report: ReadinessReport) -> dict[str, list[dict]]:
    """One suite per principle, one case per criterion."""
    gaps = {(g.category, g.criteria): g for g in report.gaps}
    result: dict[str, list[dict]] = {}

    for c in report.trust_criteria:
        case: dict = {"name": f"{c.id}: {c.criteria}", "classname": c.principle}
        gap = gaps.get((c.category, c.criteria))
        if gap:
            case["failure"] = {
                "message": f"[{gap.priority.upper()}] {gap.gap}: {c.criteria}",
                "type": gap.priority,
                "text": "\n".join([
                    f"Principle: {c.principle}",
                    f"Maturity: {MATURITY_LABELS[c.maturity]}",
                    f"Effort: {gap.effort}",
                ]),
            }
        result.setdefault(c.principle, []).append(case)

    return result


def convert_samm_to_junit(
    practices: list[Practice],
    assessments: list[StreamAssessment],
) -> dict[str, list[dict]]:
    """One suite per business function, one case per stream.

    Streams below target fail; unassessed streams are skipped.
    """
    by_stream = index_assessments(assessments)
    result: dict[str, list[dict]] = {}

    for p in practices:
        for stream_id, stream_name in (("A", p.stream_a_name), ("B", p.stream_b_name)):
            case: dict = {
                "name": f"{p.practice_id}-{stream_id}: {stream_name or p.practice_name}",
                "classname": p.business_function,
            }
            assessment = by_stream.get((p.practice_id, stream_id))
            if assessment is None:
                case["skipped"] = "Not assessed"
            else:
                level = stream_maturity(assessment)
                if level < assessment.target_level:
                    case["failure"] = {
                        "message": f"Level {level} below target {assessment.target_level}",
                        "type": "below-target",
                        "text": assessment.notes,
                    }
            result.setdefault(p.business_function, []).append(case)

    return result
