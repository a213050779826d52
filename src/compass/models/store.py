"""Remote store result models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class MutationResult(BaseModel):
    success: bool
    id: Optional[int] = None
    action: Optional[Literal["created", "updated"]] = None
    error: Optional[str] = None


class PlanResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    success: bool
    plan_id: Optional[int] = None
    task_count: int = 0
    gaps: int = 0
    total_assessed: int = 0
    error: Optional[str] = None
