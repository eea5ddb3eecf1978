"""Release configuration - env-driven.

Centralized settings using pydantic-settings. Reads from a .env file and
NIMRELEASE_* environment variables.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Stdlib logging levels accepted on the command line and in the env."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DocsStrategy(str, Enum):
    """How the documentation tree for a release is produced."""

    BUILD = "build"
    EXTRACT = "extract"


class PromotionGate(str, Enum):
    """Whether the channel update depends on the smoke test outcome.

    ``independent`` promotes purely on version ordering.
    ``require_smoke_test`` skips promotion in a combined run when the
    smoke test reported a failure.
    """

    INDEPENDENT = "independent"
    REQUIRE_SMOKE_TEST = "require_smoke_test"


class ReleaseSettings(BaseSettings):
    """Release pipeline settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export NIMRELEASE_WEB_ROOT=/srv/www/nim-lang.org
        export NIMRELEASE_DOCS_STRATEGY=extract
        export NIMRELEASE_HOTFIX_SUFFIX=-1

    Or via .env file::

        NIMRELEASE_LOG_LEVEL=DEBUG
        NIMRELEASE_PROMOTION_GATE=require_smoke_test
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NIMRELEASE_",
        env_file_encoding="utf-8",
    )

    # Artifacts
    project: str = "nim"
    base_url: str = "https://github.com/nim-lang/nightlies/releases/download"
    hotfix_suffix: str = ""

    # Filesystem layout
    web_root: Path = Path("/var/www/nim-lang.org")
    download_dir: Path | None = None  # defaults to <web_root>/download
    work_dir: Path = Path.home() / "nimrelease"

    # Documentation
    repo_url: str = "https://github.com/nim-lang/Nim.git"
    docs_strategy: DocsStrategy = DocsStrategy.BUILD
    docs_archive_suffix: str = "_x64.zip"
    docs_config_file: str = "config/nimdoc.cfg"
    docs_stylesheet: str = "nimdoc.out.css"
    docs_manifest: str = "doc/html/overview.html"

    # Smoke test
    sanitized_path_dirs: list[str] = [
        "/usr/local/sbin",
        "/usr/local/bin",
        "/usr/sbin",
        "/usr/bin",
        "/sbin",
        "/bin",
    ]
    smoke_test_categories: list[str] = ["megatest", "lib"]
    smoke_test_packages: list[str] = ["fusion", "cligen"]

    # Promotion
    promotion_gate: PromotionGate = PromotionGate.INDEPENDENT

    # Observability
    log_level: LogLevel = LogLevel.INFO

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("web_root", "download_dir", "work_dir")
    @classmethod
    def _absolute_dir(cls, value: Path | None) -> Path | None:
        # Phases chdir into these; pin relative values to the launch directory.
        return None if value is None else value.expanduser().absolute()

    @property
    def resolved_download_dir(self) -> Path:
        """Directory the downloader writes artifacts into."""
        return self.download_dir or self.web_root / "download"

    @property
    def channels_dir(self) -> Path:
        return self.web_root / "channels"

    @property
    def stable_channel_file(self) -> Path:
        """Plaintext file holding the currently promoted version."""
        return self.channels_dir / "stable"

    @property
    def docs_symlink(self) -> Path:
        """Public "current docs" link inside the web root."""
        return self.web_root / "docs"
