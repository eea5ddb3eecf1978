"""Phase 1 - Downloader.

Fetches every release artifact of a nightly build into the download
directory and writes a ``.sha256`` sibling for each one. The checksum is
computed from the file already on disk, right after its download finished,
so an artifact never has a checksum for partial content.

The first failing fetch aborts the run; remaining artifacts are not
attempted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from nimrelease.config import ReleaseSettings
from nimrelease.core.executor import CommandRunner, working_directory
from nimrelease.core.hasher import read_checksum, write_checksum
from nimrelease.models.artifacts import DEFAULT_ARTIFACTS, ArtifactSpec
from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport
from nimrelease.stages.base import ArtifactMissingError, BasePhase

logger = logging.getLogger(__name__)


class DownloadPhase(BasePhase):
    """Phase 1: Downloader - fetch artifacts and record their checksums."""

    def __init__(
        self,
        settings: ReleaseSettings,
        runner: CommandRunner | None = None,
        artifacts: Sequence[ArtifactSpec] = DEFAULT_ARTIFACTS,
    ) -> None:
        super().__init__(settings, runner)
        self.artifacts = list(artifacts)

    @property
    def phase_id(self) -> str:
        return "download"

    @property
    def display_name(self) -> str:
        return "Downloader"

    def artifact_url(self, context: ReleaseContext, spec: ArtifactSpec) -> str:
        source = spec.source_name(
            self.settings.project, context.version, self.settings.hotfix_suffix
        )
        return f"{self.settings.base_url.rstrip('/')}/{context.build_hash}/{source}"

    def execute(self, context: ReleaseContext) -> PhaseReport:
        download_dir = self.settings.resolved_download_dir
        download_dir.mkdir(parents=True, exist_ok=True)

        checksums: dict[str, str] = {}
        with working_directory(download_dir):
            for spec in self.artifacts:
                dest = spec.dest_name(self.settings.project, context.version)
                url = self.artifact_url(context, spec)
                logger.info("Fetching %s -> %s", url, dest)
                self.run_command("wget", f"--output-document={dest}", url)

                path = download_dir / dest
                if not path.is_file():
                    raise ArtifactMissingError(f"download produced no file: {dest}")
                write_checksum(path)
                checksums[dest] = read_checksum(path)

        return self.make_report(
            summary=f"{len(checksums)} artifacts in {download_dir}",
            checksums=checksums,
        )
