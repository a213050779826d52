"""Compliance store abstraction.

The store is the system of record for SAMM assessments. Scoring never depends
on which adapter is in use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from ..models.samm import OverallScore, Practice, StreamAssessment, StreamQuestion
from ..models.store import MutationResult, PlanResult

BACKENDS = ("local", "http")


class StoreError(RuntimeError):
    """A store query failed. Mutations report failures through result objects instead."""


@runtime_checkable
class ComplianceStore(Protocol):
    """Operations every store adapter must implement."""

    name: str

    async def get_practices(self, client_id: Optional[int]) -> list[Practice]: ...

    async def get_assessments(self, client_id: Optional[int]) -> list[StreamAssessment]: ...

    async def calculate_overall_score(self, client_id: Optional[int]) -> OverallScore: ...

    async def get_stream_questions(self, practice_id: str, stream_id: str) -> list[StreamQuestion]: ...

    async def update_stream_assessment(self, payload: dict) -> MutationResult: ...

    async def generate_improvement_plan(self, client_id: Optional[int]) -> PlanResult: ...


def get_store(
    config: dict,
    backend_override: Optional[str] = None,
    endpoint_override: Optional[str] = None,
    project_path: Optional[Path] = None,
) -> ComplianceStore:
    """Factory function to create the configured store adapter."""
    store_config = config.get("store", {})
    backend = backend_override or store_config.get("backend", "local")

    backend_config = dict(store_config.get(backend, {}))
    if endpoint_override:
        backend_config["endpoint"] = endpoint_override

    common_config = {k: v for k, v in store_config.items() if k not in BACKENDS}
    function_targets = config.get("samm", {}).get("function_targets") or None

    if backend == "local":
        from .local import LocalStore
        return LocalStore(
            backend_config,
            common_config,
            project_path=project_path,
            function_targets=function_targets,
        )
    elif backend == "http":
        from .http import HttpStore
        return HttpStore(backend_config, common_config)
    else:
        raise ValueError(f"Unknown store backend: {backend}")
