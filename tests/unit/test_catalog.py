"""Tests for samm/catalog.py."""

from __future__ import annotations

from pathlib import Path

from compass.models.samm import BUSINESS_FUNCTIONS
from compass.samm.catalog import filter_by_function, load_practice_catalog


class TestPracticeCatalog:
    def test_bundled_catalog(self):
        practices = load_practice_catalog()
        assert len(practices) == 15
        assert [p.order for p in practices] == list(range(1, 16))
        assert all(p.stream_a_name and p.stream_b_name for p in practices)

    def test_three_practices_per_function(self):
        practices = load_practice_catalog()
        for function in BUSINESS_FUNCTIONS:
            assert len(filter_by_function(practices, function)) == 3

    def test_project_override(self, tmp_project: Path):
        override = tmp_project / ".compass" / "samm-practices.yaml"
        override.parent.mkdir()
        override.write_text(
            "practices:\n"
            "  - practiceId: XX\n"
            "    practiceName: Custom\n"
            "    businessFunction: Governance\n"
            "    order: 2\n"
            "  - practiceId: YY\n"
            "    practiceName: First\n"
            "    businessFunction: Design\n"
            "    order: 1\n",
            encoding="utf-8",
        )
        practices = load_practice_catalog(tmp_project)
        assert [p.practice_id for p in practices] == ["YY", "XX"]

    def test_missing_override_uses_bundled(self, tmp_project: Path):
        assert len(load_practice_catalog(tmp_project)) == 15
