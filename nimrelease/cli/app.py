"""Main Typer application - global options and command registration.

Entry point: ``nimrelease`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from nimrelease.cli.commands.release import make_phase_cmd
from nimrelease.cli.commands.status import status_cmd, verify_cmd
from nimrelease.config import DocsStrategy, LogLevel, PromotionGate, ReleaseSettings

app = typer.Typer(
    name="nimrelease",
    help="nimrelease: fetch, repackage, test and promote a compiler release.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

_PHASE_COMMANDS: dict[str, str] = {
    "download": "Download release artifacts and write their checksums.",
    "docs": "Build or extract the documentation and publish it.",
    "build": "Alias for 'docs'.",
    "repackage": "Derive the .tar.gz from the .tar.xz source tarball.",
    "test": "Smoke-test the source tarball in a sanitized environment.",
    "update": "Promote the release to the stable channel if it is newer.",
    "all": "Run every phase in order.",
}


def configure_logging(level: LogLevel) -> None:
    """Route stdlib logging through Rich on stderr."""
    logging.basicConfig(
        level=level.value,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: LogLevel | None = typer.Option(
        None, case_sensitive=False, help="Logging level."
    ),
    web_root: Path | None = typer.Option(None, help="Public web root."),
    download_dir: Path | None = typer.Option(
        None, help="Artifact directory (default: <web-root>/download)."
    ),
    work_dir: Path | None = typer.Option(
        None, help="Scratch space for checkouts and smoke tests."
    ),
    docs_strategy: DocsStrategy | None = typer.Option(
        None, help="Build docs from source or extract them from an archive."
    ),
    hotfix_suffix: str | None = typer.Option(
        None, help="Suffix of the nightly artifact names, e.g. -1."
    ),
    promotion_gate: PromotionGate | None = typer.Option(
        None, help="Whether 'all' skips promotion after a failed smoke test."
    ),
) -> None:
    """Load settings (environment first, then command-line overrides)."""
    overrides = {
        "log_level": log_level,
        "web_root": web_root,
        "download_dir": download_dir,
        "work_dir": work_dir,
        "docs_strategy": docs_strategy,
        "hotfix_suffix": hotfix_suffix,
        "promotion_gate": promotion_gate,
    }
    try:
        settings = ReleaseSettings(
            **{k: v for k, v in overrides.items() if v is not None}
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    configure_logging(settings.log_level)
    ctx.obj = settings


# Register subcommands
for _name, _help in _PHASE_COMMANDS.items():
    app.command(name=_name, help=_help)(make_phase_cmd(_name))
app.command(name="status", help="Show the stable channel and docs link.")(status_cmd)
app.command(name="verify", help="Check downloaded artifacts against checksums.")(verify_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
