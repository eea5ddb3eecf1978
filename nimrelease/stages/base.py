"""Abstract base phase with an enforced lifecycle.

Every concrete phase inherits from BasePhase and implements only
``execute()``. The ``run_phase()`` wrapper is **not overridable**: it logs
entry and exit and converts every hard failure raised inside ``execute()``
into a ``PhaseFailure`` that names the phase, so the phase label travels
with the error instead of living in global state.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Sequence
from typing import Any, final

from nimrelease.config import ReleaseSettings
from nimrelease.core.executor import (
    CommandError,
    CommandResult,
    CommandRunner,
    SubprocessRunner,
)
from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport, PhaseState
from nimrelease.models.versioning import VersionFormatError

logger = logging.getLogger(__name__)


class ArtifactError(RuntimeError):
    """Raised when an artifact a phase depends on is unusable."""


class ArtifactMissingError(ArtifactError):
    """Raised when a file a phase depends on is not on disk."""


class PhaseFailure(RuntimeError):
    """Hard abort of a phase; the whole run stops.

    ``str()`` gives the operator-facing two-line report::

        FAILURE: <command>
        PHASE: <phase_id>
    """

    def __init__(self, phase_id: str, command: str) -> None:
        super().__init__(f"FAILURE: {command}\nPHASE: {phase_id}")
        self.phase_id = phase_id
        self.command = command


class BasePhase(abc.ABC):
    """Abstract base for all release pipeline phases.

    Subclasses **must** implement:
        * ``phase_id``     - identifier used in failure reports (``"download"``).
        * ``display_name`` - human-readable name for the summary table.
        * ``execute(context)`` - the phase's core logic.

    Subclasses **must not** override ``run_phase()``.

    Parameters
    ----------
    settings:
        Release settings (paths, URLs, smoke test selection).
    runner:
        Command runner used for every external tool. Defaults to a real
        ``SubprocessRunner``.
    """

    def __init__(
        self,
        settings: ReleaseSettings,
        runner: CommandRunner | None = None,
    ) -> None:
        self.settings = settings
        self.runner: CommandRunner = runner or SubprocessRunner()

    # ------------------------------------------------------------------
    # Abstract interface
    # ------------------------------------------------------------------

    @property
    @abc.abstractmethod
    def phase_id(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def display_name(self) -> str:
        ...

    @abc.abstractmethod
    def execute(self, context: ReleaseContext) -> PhaseReport:
        """Run the phase for *context* and describe what was done."""
        ...

    # ------------------------------------------------------------------
    # Lifecycle - NOT overridable
    # ------------------------------------------------------------------

    @final
    def run_phase(self, context: ReleaseContext) -> PhaseReport:
        """Execute the phase, converting hard failures to ``PhaseFailure``."""
        logger.info(
            "%s [%s] starting for %s (build %s)",
            self.display_name,
            self.phase_id,
            context.version,
            context.build_hash,
        )
        try:
            report = self.execute(context)
        except CommandError as exc:
            logger.error(
                "%s [%s] command failed: %s", self.display_name, self.phase_id, exc
            )
            raise PhaseFailure(self.phase_id, exc.command) from exc
        except (ArtifactError, VersionFormatError, OSError) as exc:
            logger.error(
                "%s [%s] aborted: %s", self.display_name, self.phase_id, exc
            )
            raise PhaseFailure(self.phase_id, str(exc)) from exc

        logger.info(
            "%s [%s] finished: %s",
            self.display_name,
            self.phase_id,
            report.state.value,
        )
        return report

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    def run_command(self, *args: str, capture: bool = False) -> CommandResult:
        """Run a command and raise ``CommandError`` if it exits non-zero."""
        return self.runner.run(args, capture=capture).check()

    def exec_all(self, commands: Sequence[Sequence[str]]) -> None:
        for args in commands:
            self.run_command(*args)

    def make_report(
        self,
        state: PhaseState = PhaseState.PASSED,
        summary: str = "",
        **details: Any,
    ) -> PhaseReport:
        return PhaseReport(
            phase_id=self.phase_id,
            display_name=self.display_name,
            state=state,
            summary=summary,
            details=details,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} phase_id={self.phase_id!r}>"
