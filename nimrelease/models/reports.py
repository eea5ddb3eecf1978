"""Phase outcome models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class PhaseState(str, Enum):
    """Outcome of a phase that did not hard-abort."""

    PASSED = "passed"
    FAILED = "failed"  # soft failure, the pipeline continues
    SKIPPED = "skipped"


class PhaseReport(BaseModel):
    """What a phase did, for the end-of-run summary."""

    model_config = ConfigDict(frozen=True)

    phase_id: str
    display_name: str
    state: PhaseState = PhaseState.PASSED
    summary: str = ""
    details: dict[str, Any] = {}

    @property
    def passed(self) -> bool:
        return self.state == PhaseState.PASSED
