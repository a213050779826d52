"""File-backed store for offline runs.

State lives in one YAML document with ``practices``, ``questions``,
``assessments`` and ``plans`` lists. Saves create or fully replace the record
for a (client, practice, stream); the last write wins.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from ..models.samm import OverallScore, Practice, StreamAssessment, StreamQuestion
from ..models.store import MutationResult, PlanResult
from ..samm.catalog import load_practice_catalog
from ..samm.planning import PlanningError, generate_improvement_plan
from ..samm.scoring import calculate_overall_score


class LocalStore:
    name = "local"

    def __init__(
        self,
        backend_config: dict,
        common_config: dict,
        project_path: Optional[Path] = None,
        function_targets: Optional[dict[str, float]] = None,
    ):
        self.config = backend_config
        self.common = common_config
        self.project_path = project_path
        self.function_targets = function_targets

        path = Path(backend_config.get("path", "samm-store.yaml"))
        if not path.is_absolute():
            base = (project_path / ".compass") if project_path else Path.cwd()
            path = base / path
        self.path = path

    def load(self) -> dict:
        if not self.path.exists():
            return {"practices": [], "questions": [], "assessments": [], "plans": []}
        data = yaml.safe_load(self.path.read_text(encoding="utf-8-sig")) or {}
        for key in ("practices", "questions", "assessments", "plans"):
            data[key] = data.get(key) or []
        return data

    def save(self, data: dict) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = yaml.safe_dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=120,
        )
        self.path.write_text(content, encoding="utf-8")
        return self.path

    async def get_practices(self, client_id: Optional[int]) -> list[Practice]:
        stored = self.load()["practices"]
        if stored:
            return sorted((Practice.model_validate(p) for p in stored), key=lambda p: p.order)
        return load_practice_catalog(self.project_path)

    async def get_assessments(self, client_id: Optional[int]) -> list[StreamAssessment]:
        records = [StreamAssessment.model_validate(a) for a in self.load()["assessments"]]
        return [a for a in records if a.client_id == client_id]

    async def calculate_overall_score(self, client_id: Optional[int]) -> OverallScore:
        practices = await self.get_practices(client_id)
        assessments = await self.get_assessments(client_id)
        return calculate_overall_score(practices, assessments, self.function_targets)

    async def get_stream_questions(self, practice_id: str, stream_id: str) -> list[StreamQuestion]:
        questions = [StreamQuestion.model_validate(q) for q in self.load()["questions"]]
        matching = [q for q in questions if q.practice_id == practice_id and q.stream_id == stream_id]
        return sorted(matching, key=lambda q: q.level)

    async def update_stream_assessment(self, payload: dict) -> MutationResult:
        try:
            incoming = StreamAssessment.model_validate(payload)
        except ValidationError as e:
            return MutationResult(success=False, error=str(e))

        data = self.load()
        records = data["assessments"]
        key = (incoming.client_id, incoming.practice_id, incoming.stream_id)

        index = None
        for i, raw in enumerate(records):
            existing = StreamAssessment.model_validate(raw)
            if (existing.client_id, existing.practice_id, existing.stream_id) == key:
                index = i
                incoming.id = existing.id
                break

        if index is None:
            incoming.id = max((r.get("id") or 0 for r in records), default=0) + 1
            action = "created"
        else:
            action = "updated"

        record = incoming.model_dump(mode="json", by_alias=True)
        if index is None:
            records.append(record)
        else:
            records[index] = record

        self.save(data)
        return MutationResult(success=True, id=incoming.id, action=action)

    async def generate_improvement_plan(self, client_id: Optional[int]) -> PlanResult:
        assessments = await self.get_assessments(client_id)
        data = self.load()
        questions = [StreamQuestion.model_validate(q) for q in data["questions"]]
        plan_id = max((p.get("planId") or 0 for p in data["plans"]), default=0) + 1

        try:
            plan = generate_improvement_plan(client_id, assessments, questions, plan_id=plan_id)
        except PlanningError as e:
            return PlanResult(success=False, error=f"{e.code} | {e}")

        data["plans"].append(plan.model_dump(mode="json", by_alias=True))
        self.save(data)

        return PlanResult(
            success=True,
            plan_id=plan.plan_id,
            task_count=len(plan.tasks),
            gaps=plan.gaps,
            total_assessed=plan.total_assessed,
        )
