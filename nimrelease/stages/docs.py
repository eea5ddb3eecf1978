"""Phase 2 - Documentation Stager.

Produces the documentation tree for a release and publishes it under
``<web_root>/<version>/``. Two strategies, chosen by
``ReleaseSettings.docs_strategy``:

``build``
    Clone (or reuse) a version-scoped checkout, switch to the maintenance
    branch, cache-bust the stylesheet reference, bootstrap the compiler
    under a sanitized PATH and run ``koch docs``. The build is skipped when
    its output manifest already exists.

``extract``
    Unpack a downloaded binary archive into a scratch directory and copy
    its pre-built ``doc/html`` tree. The scratch directory is removed
    afterwards.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import zipfile
from pathlib import Path

from nimrelease.config import DocsStrategy
from nimrelease.core.executor import sanitized_path, working_directory
from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport
from nimrelease.models.versioning import ReleaseVersion
from nimrelease.stages.base import ArtifactError, ArtifactMissingError, BasePhase

logger = logging.getLogger(__name__)

_HTML_SUBDIR = Path("doc") / "html"


class DocsPhase(BasePhase):
    """Phase 2: Documentation Stager - build or extract, then publish."""

    @property
    def phase_id(self) -> str:
        return "docs"

    @property
    def display_name(self) -> str:
        return "Documentation Stager"

    # ------------------------------------------------------------------
    # Paths and precondition checks
    # ------------------------------------------------------------------

    def checkout_dir(self, context: ReleaseContext) -> Path:
        return self.settings.work_dir / f"{self.settings.project}-{context.version}"

    def public_docs_dir(self, context: ReleaseContext) -> Path:
        return self.settings.web_root / str(context.version)

    def checkout_exists(self, context: ReleaseContext) -> bool:
        """Whether a previous run already cloned the sources."""
        return self.checkout_dir(context).is_dir()

    def docs_already_built(self, checkout: Path) -> bool:
        """Whether ``koch docs`` already produced its output manifest."""
        return (checkout / self.settings.docs_manifest).is_file()

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------

    def execute(self, context: ReleaseContext) -> PhaseReport:
        if self.settings.docs_strategy == DocsStrategy.EXTRACT:
            source = self._extract_from_archive(context)
        else:
            source = self._build_from_source(context)
        return self.make_report(
            summary=f"docs published to {self.public_docs_dir(context)}",
            strategy=self.settings.docs_strategy.value,
            source=source,
            published=str(self.public_docs_dir(context)),
        )

    def _build_from_source(self, context: ReleaseContext) -> str:
        checkout = self.checkout_dir(context)
        self.settings.work_dir.mkdir(parents=True, exist_ok=True)

        if self.checkout_exists(context):
            logger.info("Reusing checkout %s", checkout)
        else:
            with working_directory(self.settings.work_dir):
                self.run_command("git", "clone", self.settings.repo_url, checkout.name)

        with working_directory(checkout):
            self.run_command("git", "checkout", context.version.branch)
            self.run_command("git", "pull")
            self.patch_stylesheet(checkout, context.version)

            if self.docs_already_built(checkout):
                logger.info("Docs already built in %s, skipping build", checkout)
            else:
                with sanitized_path(checkout / "bin", self.settings.sanitized_path_dirs):
                    self.run_command("sh", "build_all.sh")
                    self.run_command("./koch", "docs")

        self._publish(checkout / _HTML_SUBDIR, context)
        return str(checkout)

    def _extract_from_archive(self, context: ReleaseContext) -> str:
        name = f"{self.settings.project}-{context.version}"
        archive = (
            self.settings.resolved_download_dir
            / f"{name}{self.settings.docs_archive_suffix}"
        )
        if not archive.is_file():
            raise ArtifactMissingError(f"docs archive not found: {archive}")

        scratch = self.settings.work_dir / f"docs-{context.version}"
        if scratch.exists():
            shutil.rmtree(scratch)
        scratch.mkdir(parents=True)
        try:
            logger.info("Unpacking %s into %s", archive.name, scratch)
            try:
                shutil.unpack_archive(archive, scratch)
            except (shutil.ReadError, zipfile.BadZipFile, tarfile.TarError) as exc:
                raise ArtifactError(f"cannot unpack {archive.name}: {exc}") from exc
            self._publish(scratch / name / _HTML_SUBDIR, context)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
        return str(archive)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def patch_stylesheet(self, checkout: Path, version: ReleaseVersion) -> bool:
        """Append a cache-busting query to the doc stylesheet reference.

        The CDN in front of the website caches the stylesheet aggressively,
        so each release references it under a new URL. Returns ``True`` if
        the config file was changed.
        """
        config_file = checkout / self.settings.docs_config_file
        if not config_file.is_file():
            logger.warning("Docs config %s not found, stylesheet not patched", config_file)
            return False

        text = config_file.read_text(encoding="utf-8")
        stylesheet = self.settings.docs_stylesheet
        busted = f"{stylesheet}?v={version}"
        if busted in text:
            return False
        if stylesheet not in text:
            logger.warning("No %s reference in %s", stylesheet, config_file)
            return False

        config_file.write_text(text.replace(stylesheet, busted), encoding="utf-8")
        logger.info("Patched %s -> %s in %s", stylesheet, busted, config_file.name)
        return True

    def _publish(self, html_dir: Path, context: ReleaseContext) -> None:
        if not html_dir.is_dir():
            raise ArtifactMissingError(f"documentation tree not found: {html_dir}")
        target = self.public_docs_dir(context)
        logger.info("Copying %s -> %s", html_dir, target)
        shutil.copytree(html_dir, target, dirs_exist_ok=True)
