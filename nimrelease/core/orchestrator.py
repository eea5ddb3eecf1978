"""Release orchestrator - runs one phase or the whole pipeline.

Phases share nothing in memory; each reads what the previous one left on
disk. The orchestrator only decides which phases run, in what order, and
whether the channel update is gated on the smoke test outcome.
"""

from __future__ import annotations

import logging

from nimrelease.config import PromotionGate, ReleaseSettings
from nimrelease.core.executor import CommandRunner, SubprocessRunner
from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport, PhaseState
from nimrelease.stages import PHASE_ORDER, get_phase

logger = logging.getLogger(__name__)

# CLI command name -> phase ids, in execution order.
COMMANDS: dict[str, list[str]] = {
    "download": ["download"],
    "docs": ["docs"],
    "build": ["docs"],
    "repackage": ["repackage"],
    "test": ["test"],
    "update": ["update"],
    "all": list(PHASE_ORDER),
}


class UnknownCommandError(ValueError):
    """Raised for a command name that is not in ``COMMANDS``."""


class ReleasePipeline:
    """Sequential release pipeline.

    Parameters
    ----------
    settings:
        Release settings. Loaded from the environment if not provided.
    runner:
        Command runner shared by all phases.
    """

    def __init__(
        self,
        settings: ReleaseSettings | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.settings = settings or ReleaseSettings()
        self.runner: CommandRunner = runner or SubprocessRunner()

    @staticmethod
    def phases_for(command: str) -> list[str]:
        try:
            return list(COMMANDS[command])
        except KeyError:
            raise UnknownCommandError(
                f"Unknown command {command!r}. Choose from: {', '.join(COMMANDS)}"
            ) from None

    def run(self, command: str, context: ReleaseContext) -> list[PhaseReport]:
        """Run the phases for *command* in order.

        Stops at the first hard failure by letting ``PhaseFailure``
        propagate. Returns one report per phase that ran or was skipped.
        """
        reports: list[PhaseReport] = []
        for phase_id in self.phases_for(command):
            if phase_id == "update" and self._promotion_blocked(reports):
                logger.warning(
                    "Smoke test failed and promotion_gate=%s; not updating channels",
                    self.settings.promotion_gate.value,
                )
                reports.append(
                    PhaseReport(
                        phase_id="update",
                        display_name="Channel Updater",
                        state=PhaseState.SKIPPED,
                        summary="blocked by failed smoke test",
                    )
                )
                continue

            phase = get_phase(phase_id, self.settings, self.runner)
            reports.append(phase.run_phase(context))
        return reports

    def _promotion_blocked(self, reports: list[PhaseReport]) -> bool:
        if self.settings.promotion_gate != PromotionGate.REQUIRE_SMOKE_TEST:
            return False
        return any(
            r.phase_id == "test" and r.state == PhaseState.FAILED for r in reports
        )
