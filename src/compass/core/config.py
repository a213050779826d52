"""Compass configuration.

Effective settings are the built-in defaults, overlaid by the project file
(.compass/config.yaml), overlaid by command-line options.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "project": {
        "name": "",
        "organization": "",
    },
    "client_id": None,
    "store": {
        "backend": "local",
        "timeout_seconds": 30,
        "local": {
            "path": "samm-store.yaml",
        },
        "http": {
            "endpoint": "",
            "router": "sammV2",
            "api_key_env": "COMPASS_API_TOKEN",
        },
    },
    "samm": {
        "function_targets": {},
    },
    "soc2": {
        "target_score": 80,
        "roadmap_order": "source",
        "roadmap_interval_months": 2,
    },
    "ci": {
        "exit_codes": {"audit_ready": 0, "ready_for_review": 2, "needs_improvement": 1},
    },
}


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively overlay ``override`` on ``base``. Lists are replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_project_config(project_path: Path) -> dict:
    """Load project configuration from .compass/config.yaml.

    A missing or unparseable file yields an empty dict.
    """
    config_path = project_path / ".compass" / "config.yaml"
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_text(encoding="utf-8-sig")  # utf-8-sig strips BOM
        data = yaml.safe_load(content)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def get_effective_config(
    project_path: Path,
    cli_overrides: Optional[dict] = None,
) -> dict:
    """Get the fully resolved configuration for a run."""
    config = copy.deepcopy(DEFAULT_CONFIG)

    project_config = load_project_config(project_path)
    if project_config:
        config = deep_merge(config, project_config)

    if cli_overrides:
        config = deep_merge(config, cli_overrides)

    return config
