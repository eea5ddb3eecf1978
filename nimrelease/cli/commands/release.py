"""``nimrelease <command> VERSION HASH`` - run one phase or the pipeline.

Each phase command (and ``all``) takes the public release version and the
nightly build hash. Missing arguments print the usage line and exit
without running anything.
"""

from __future__ import annotations

from collections.abc import Callable

import typer
from rich.console import Console

from nimrelease.config import ReleaseSettings
from nimrelease.core.executor import SubprocessRunner
from nimrelease.core.orchestrator import ReleasePipeline
from nimrelease.models.context import ReleaseContext
from nimrelease.models.versioning import VersionFormatError
from nimrelease.monitor.renderer import ReportRenderer
from nimrelease.stages.base import PhaseFailure

console = Console()

USAGE = "Usage: nimrelease <command> <version> <hash>"


def run_release(
    settings: ReleaseSettings,
    command: str,
    version: str | None,
    build_hash: str | None,
) -> None:
    """Validate the arguments, run the pipeline and report the outcome."""
    renderer = ReportRenderer(console=console)

    if not version or not build_hash:
        console.print(USAGE, markup=False, highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)

    try:
        context = ReleaseContext.from_args(version, build_hash)
    except VersionFormatError as exc:
        renderer.print_failure(f"FAILURE: {exc}\nPHASE: startup")
        raise typer.Exit(code=1)

    pipeline = ReleasePipeline(settings, runner=SubprocessRunner())
    try:
        reports = pipeline.run(command, context)
    except PhaseFailure as exc:
        renderer.print_failure(str(exc))
        raise typer.Exit(code=1)

    renderer.print_reports(context, reports)


def make_phase_cmd(command: str) -> Callable[..., None]:
    """Build the Typer command function for *command*."""

    def phase_cmd(
        ctx: typer.Context,
        version: str | None = typer.Argument(
            None,
            help="Release version, e.g. 1.4.8.",
            show_default=False,
        ),
        build_hash: str | None = typer.Argument(
            None,
            metavar="HASH",
            help="Nightly build identifier, e.g. 2020-10-16-version-1-4-5ab2e4b.",
            show_default=False,
        ),
    ) -> None:
        run_release(ctx.obj, command, version, build_hash)

    phase_cmd.__name__ = f"{command}_cmd"
    return phase_cmd
