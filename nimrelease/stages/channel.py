"""Phase 5 - Channel Updater.

Decides whether the release becomes the advertised stable version. A
release is promoted only if it is newer than the recorded stable version;
release candidates (odd patch) never are. Promotion repoints the public
``docs`` symlink and rewrites ``channels/stable``. Both writes go through a
temporary sibling plus ``os.replace`` so readers never observe a partial
state.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport, PhaseState
from nimrelease.models.versioning import ZERO_VERSION, ReleaseVersion
from nimrelease.stages.base import ArtifactError, BasePhase

logger = logging.getLogger(__name__)


class ChannelUpdatePhase(BasePhase):
    """Phase 5: Channel Updater - promote to stable when newer."""

    @property
    def phase_id(self) -> str:
        return "update"

    @property
    def display_name(self) -> str:
        return "Channel Updater"

    # ------------------------------------------------------------------
    # Stable channel record
    # ------------------------------------------------------------------

    def read_stable(self) -> ReleaseVersion:
        """Currently promoted version; ``0.0.0`` if nothing was promoted yet.

        A malformed record raises ``VersionFormatError``.
        """
        channel_file = self.settings.stable_channel_file
        if not channel_file.is_file():
            logger.info(
                "No stable channel record at %s, assuming %s", channel_file, ZERO_VERSION
            )
            return ZERO_VERSION
        return ReleaseVersion.parse(channel_file.read_text(encoding="utf-8"))

    def write_stable(self, version: ReleaseVersion) -> None:
        channels = self.settings.channels_dir
        channels.mkdir(parents=True, exist_ok=True)
        target = self.settings.stable_channel_file
        tmp = target.with_name(f".{target.name}.tmp")
        tmp.write_text(f"{version}\n", encoding="utf-8")
        os.replace(tmp, target)

    # ------------------------------------------------------------------
    # Docs symlink
    # ------------------------------------------------------------------

    def update_docs_link(self, version: ReleaseVersion) -> Path:
        """Point ``<web_root>/docs`` at ``<version>`` and verify it."""
        link = self.settings.docs_symlink
        tmp = link.with_name(f".{link.name}.tmp")
        tmp.unlink(missing_ok=True)
        os.symlink(str(version), tmp)
        os.replace(tmp, link)

        listing = sorted(entry.name for entry in self.settings.web_root.iterdir())
        logger.info("Web root now contains: %s", ", ".join(listing))
        if link.name not in listing or os.readlink(link) != str(version):
            raise ArtifactError(f"docs symlink {link} does not point at {version}")
        return link

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------

    def execute(self, context: ReleaseContext) -> PhaseReport:
        current = self.read_stable()
        new = context.version

        if not new.is_newer_than(current):
            reason = "release candidate" if new.is_release_candidate else "not newer"
            logger.info("Not promoting %s (%s); stable stays %s", new, reason, current)
            return self.make_report(
                state=PhaseState.SKIPPED,
                summary=f"stable remains {current}",
                stable=str(current),
                promoted=False,
            )

        self.settings.web_root.mkdir(parents=True, exist_ok=True)
        self.update_docs_link(new)
        self.write_stable(new)
        logger.info("Promoted %s to stable (was %s)", new, current)
        return self.make_report(
            summary=f"stable {current} -> {new}",
            stable=str(new),
            previous=str(current),
            promoted=True,
        )
