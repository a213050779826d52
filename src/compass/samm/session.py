"""Per-stream edit state for SAMM assessments.

A ``StreamEditor`` holds unsaved edits for one (client, practice, stream).
Nothing reaches the store until ``save()``; a failed save leaves the edits
in place so the caller can retry.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Iterable, Optional

from ..models.samm import StreamAssessment
from ..models.store import MutationResult
from .scoring import MAX_LEVEL, calculate_stream_maturity

if TYPE_CHECKING:
    from ..client.base import ComplianceStore

DEFAULT_TARGET_LEVEL = 1


class StreamEditor:
    """Local edit state for a single stream assessment."""

    def __init__(
        self,
        client_id: Optional[int],
        practice_id: str,
        stream_id: str,
        assessment: Optional[StreamAssessment] = None,
        known_practices: Optional[Iterable[str]] = None,
    ):
        self.client_id = client_id
        self.practice_id = practice_id
        self.stream_id = stream_id
        self.known_practices = set(known_practices) if known_practices is not None else None
        self._loaded = assessment
        self.dirty = False
        self._load(assessment)

    @classmethod
    def from_assessments(
        cls,
        client_id: Optional[int],
        practice_id: str,
        stream_id: str,
        assessments: list[StreamAssessment],
        known_practices: Optional[Iterable[str]] = None,
    ) -> "StreamEditor":
        existing = next(
            (
                a for a in assessments
                if a.practice_id == practice_id and a.stream_id == stream_id
            ),
            None,
        )
        return cls(client_id, practice_id, stream_id, existing, known_practices)

    def _load(self, assessment: Optional[StreamAssessment]) -> None:
        if assessment is None:
            self.answers: dict[int, bool] = {}
            self.quality: dict[int, dict[int, bool]] = {}
            self.level_notes: dict[int, str] = {}
            self.notes = ""
            self.target_level = DEFAULT_TARGET_LEVEL
            return
        self.answers = dict(assessment.assessment_answers)
        self.quality = copy.deepcopy(assessment.quality_criteria)
        self.level_notes = dict(assessment.level_notes)
        self.notes = assessment.notes
        self.target_level = assessment.target_level or DEFAULT_TARGET_LEVEL

    @property
    def calculated_maturity(self) -> int:
        return calculate_stream_maturity(self.answers)

    def toggle_answer(self, level: int, value: bool) -> None:
        self.answers[int(level)] = value
        self.dirty = True

    def toggle_quality(self, level: int, index: int, value: bool) -> None:
        self.quality.setdefault(int(level), {})[int(index)] = value
        self.dirty = True

    def set_level_note(self, level: int, text: str) -> None:
        self.level_notes[int(level)] = text
        self.dirty = True

    def set_notes(self, text: str) -> None:
        self.notes = text
        self.dirty = True

    def set_target(self, level: int) -> None:
        self.target_level = int(level)
        self.dirty = True

    def reset(self) -> None:
        """Discard unsaved edits and restore the last loaded record."""
        self._load(self._loaded)
        self.dirty = False

    def validate(self) -> list[str]:
        """Client-side checks run before any call to the store."""
        errors: list[str] = []
        if self.stream_id not in ("A", "B"):
            errors.append(f"Stream must be A or B, got {self.stream_id!r}")
        if not self.practice_id:
            errors.append("Practice is required")
        elif self.known_practices is not None and self.practice_id not in self.known_practices:
            errors.append(f"Unknown practice {self.practice_id!r}")
        if not 1 <= self.target_level <= MAX_LEVEL:
            errors.append(f"Target level must be between 1 and {MAX_LEVEL}")
        for level in list(self.answers) + list(self.quality) + list(self.level_notes):
            if not 1 <= level <= MAX_LEVEL:
                errors.append(f"Level {level} is outside 1-{MAX_LEVEL}")
                break
        if any(index < 0 for items in self.quality.values() for index in items):
            errors.append("Quality criterion index must not be negative")
        return errors

    def build_payload(self) -> dict:
        """Full replacement record for ``update_stream_assessment``."""
        return {
            "clientId": self.client_id,
            "practiceId": self.practice_id,
            "streamId": self.stream_id,
            "maturityLevel": self.calculated_maturity,
            "targetLevel": self.target_level,
            "assessmentAnswers": dict(self.answers),
            "qualityCriteria": copy.deepcopy(self.quality),
            "levelNotes": dict(self.level_notes),
            "notes": self.notes,
        }

    async def save(self, store: "ComplianceStore") -> MutationResult:
        """Persist the edit state as one record. No retry on failure."""
        errors = self.validate()
        if errors:
            return MutationResult(success=False, error="; ".join(errors))

        payload = self.build_payload()
        result = await store.update_stream_assessment(payload)
        if result.success:
            self._loaded = StreamAssessment.model_validate({**payload, "id": result.id})
            self.dirty = False
        return result
