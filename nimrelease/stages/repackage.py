"""Phase 3 - Tarball Repackager.

Package channel consumers only understand gzip, so the primary ``.tar.xz``
is re-encoded as ``.tar.gz``. The gzip header carries no filename and a
zero mtime, which makes repeated runs produce byte-identical output.
"""

from __future__ import annotations

import gzip
import logging
import lzma
import os
import shutil

from nimrelease.core.hasher import read_checksum, write_checksum
from nimrelease.models.artifacts import gzip_tarball_name, source_tarball_name
from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport
from nimrelease.stages.base import ArtifactError, ArtifactMissingError, BasePhase

logger = logging.getLogger(__name__)

_COPY_BUFSIZE = 1 << 20


class RepackagePhase(BasePhase):
    """Phase 3: Tarball Repackager - derive ``.tar.gz`` from ``.tar.xz``."""

    @property
    def phase_id(self) -> str:
        return "repackage"

    @property
    def display_name(self) -> str:
        return "Tarball Repackager"

    def execute(self, context: ReleaseContext) -> PhaseReport:
        download_dir = self.settings.resolved_download_dir
        project = self.settings.project
        source = download_dir / source_tarball_name(project, context.version)
        if not source.is_file():
            raise ArtifactMissingError(f"source tarball not found: {source}")

        target = download_dir / gzip_tarball_name(project, context.version)
        working_copy = download_dir / f"{project}-{context.version}_copy.tar.gz"

        logger.info("Recompressing %s -> %s", source.name, target.name)
        try:
            with lzma.open(source, "rb") as xz_in, open(working_copy, "wb") as raw_out:
                with gzip.GzipFile(
                    filename="",
                    mode="wb",
                    fileobj=raw_out,
                    compresslevel=9,
                    mtime=0,
                ) as gz_out:
                    shutil.copyfileobj(xz_in, gz_out, _COPY_BUFSIZE)
            os.replace(working_copy, target)
        except (lzma.LZMAError, EOFError) as exc:
            raise ArtifactError(f"corrupt source tarball {source.name}: {exc}") from exc
        finally:
            working_copy.unlink(missing_ok=True)

        write_checksum(target)
        return self.make_report(
            summary=f"{target.name} written",
            path=str(target),
            sha256=read_checksum(target),
        )
