"""Step state for the SOC 2 readiness wizard."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from ..models.soc2 import ReadinessReport, Soc2Type, TrustCriterion
from .catalog import build_initial_criteria
from .readiness import build_readiness_report

STEPS: list[str] = [
    "System Overview",
    "Trust Criteria Assessment",
    "Gap Analysis",
    "Readiness Score",
    "Implementation Roadmap",
]

EDITABLE_FIELDS = {"implemented", "maturity", "evidence", "notes"}


class ReadinessWizard:
    """Holds wizard inputs and the current step.

    Completing the wizard only flags it as complete; nothing is persisted.
    """

    def __init__(
        self,
        organization: str = "",
        soc2_type: Soc2Type | str = Soc2Type.TYPE2,
        system_description: str = "",
        service_description: str = "",
        criteria: Optional[list[TrustCriterion]] = None,
    ):
        self.organization = organization
        self.soc2_type = Soc2Type(soc2_type) if soc2_type else None
        self.system_description = system_description
        self.service_description = service_description
        self.criteria = criteria if criteria is not None else build_initial_criteria()
        self.current_step = 0
        self.completed = False

    @classmethod
    def from_dict(cls, data: dict) -> "ReadinessWizard":
        """Build from an input document (``organization``, ``type``, ``criteria`` ...)."""
        raw_criteria = data.get("criteria")
        criteria = None
        if raw_criteria is not None:
            criteria = [TrustCriterion.model_validate(c) for c in raw_criteria]
        return cls(
            organization=data.get("organization") or "",
            soc2_type=data.get("type") or Soc2Type.TYPE2,
            system_description=data.get("system_description") or data.get("systemDescription") or "",
            service_description=data.get("service_description") or data.get("serviceDescription") or "",
            criteria=criteria,
        )

    def update_criterion(self, criterion_id: str, field: str, value: Any) -> None:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field is not editable: {field}")
        for index, criterion in enumerate(self.criteria):
            if criterion.id == criterion_id:
                data = criterion.model_dump()
                data[field] = value
                self.criteria[index] = TrustCriterion.model_validate(data)
                return
        raise KeyError(criterion_id)

    def is_step_valid(self, step: Optional[int] = None) -> bool:
        step = self.current_step if step is None else step
        if step == 0:
            return bool(self.organization and self.soc2_type)
        if step == 1:
            return any(c.implemented for c in self.criteria)
        return 0 <= step < len(STEPS)

    def validation_errors(self) -> list[str]:
        """Messages for the input steps (0 and 1) that are not yet valid."""
        errors: list[str] = []
        if not self.is_step_valid(0):
            errors.append("Organization name and SOC 2 type are required")
        if not self.is_step_valid(1):
            errors.append("At least one trust criterion must be marked implemented")
        return errors

    def next_step(self) -> bool:
        """Advance one step. Returns False when the current step is invalid."""
        if not self.is_step_valid():
            return False
        if self.current_step < len(STEPS) - 1:
            self.current_step += 1
        else:
            self.completed = True
        return True

    def previous_step(self) -> None:
        if self.current_step > 0:
            self.current_step -= 1

    @property
    def progress(self) -> float:
        return self.current_step / (len(STEPS) - 1) * 100

    def build_report(
        self,
        target_score: int = 80,
        today: Optional[date] = None,
        order: str = "source",
        interval_months: int = 2,
    ) -> ReadinessReport:
        return build_readiness_report(
            self.criteria,
            organization=self.organization,
            soc2_type=self.soc2_type or Soc2Type.TYPE2,
            system_description=self.system_description,
            service_description=self.service_description,
            target_score=target_score,
            today=today,
            order=order,
            interval_months=interval_months,
        )
