"""nimrelease pipeline phases - registry mapping phase_id to phase class.

Usage::

    from nimrelease.stages import PHASE_REGISTRY, get_phase

    phase = get_phase("repackage", settings, runner)
    report = phase.run_phase(context)
"""

from __future__ import annotations

from nimrelease.config import ReleaseSettings
from nimrelease.core.executor import CommandRunner
from nimrelease.stages.base import (
    ArtifactError,
    ArtifactMissingError,
    BasePhase,
    PhaseFailure,
)
from nimrelease.stages.channel import ChannelUpdatePhase
from nimrelease.stages.docs import DocsPhase
from nimrelease.stages.download import DownloadPhase
from nimrelease.stages.repackage import RepackagePhase
from nimrelease.stages.smoke_test import SmokeTestPhase

# ---------------------------------------------------------------------------
# Phase registry: phase_id -> phase class
# ---------------------------------------------------------------------------

PHASE_REGISTRY: dict[str, type[BasePhase]] = {
    "download": DownloadPhase,
    "docs": DocsPhase,
    "repackage": RepackagePhase,
    "test": SmokeTestPhase,
    "update": ChannelUpdatePhase,
}

# Order used by the combined ``all`` command.
PHASE_ORDER: list[str] = ["download", "docs", "repackage", "test", "update"]


def get_phase(
    phase_id: str,
    settings: ReleaseSettings,
    runner: CommandRunner | None = None,
) -> BasePhase:
    """Instantiate and return a phase by its ``phase_id``.

    Raises ``KeyError`` if the phase_id is not registered.
    """
    try:
        cls = PHASE_REGISTRY[phase_id]
    except KeyError:
        raise KeyError(
            f"Unknown phase_id {phase_id!r}. "
            f"Registered phases: {sorted(PHASE_REGISTRY.keys())}"
        ) from None
    return cls(settings, runner)


__all__ = [
    # Base
    "BasePhase",
    "PhaseFailure",
    "ArtifactError",
    "ArtifactMissingError",
    # Registry
    "PHASE_REGISTRY",
    "PHASE_ORDER",
    "get_phase",
    # Concrete phases
    "DownloadPhase",
    "DocsPhase",
    "RepackagePhase",
    "SmokeTestPhase",
    "ChannelUpdatePhase",
]
