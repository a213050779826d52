"""SAMM practice reference data loading."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Optional

import yaml

from ..models.samm import Practice

CATALOG_FILE = "samm-practices.yaml"


def _read_catalog(project_path: Optional[Path]) -> dict:
    """Project override first, then the bundled catalog."""
    if project_path:
        override = project_path / ".compass" / CATALOG_FILE
        if override.exists():
            return yaml.safe_load(override.read_text(encoding="utf-8-sig")) or {}

    data_pkg = resources.files("compass.data")
    return yaml.safe_load((data_pkg / CATALOG_FILE).read_text(encoding="utf-8")) or {}


def load_practice_catalog(project_path: Optional[Path] = None) -> list[Practice]:
    """Load practices ordered by their ``order`` field."""
    catalog = _read_catalog(project_path)
    practices = [Practice.model_validate(p) for p in catalog.get("practices", []) or []]
    return sorted(practices, key=lambda p: p.order)


def filter_by_function(practices: list[Practice], business_function: str) -> list[Practice]:
    return [p for p in practices if p.business_function == business_function]
