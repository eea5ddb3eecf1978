"""Rich terminal renderer for pipeline results.

Color scheme
------------
- green  : PASSED
- red    : FAILED (soft failure)
- yellow : SKIPPED
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nimrelease.models.context import ReleaseContext
from nimrelease.models.reports import PhaseReport, PhaseState

_STATE_ICONS: dict[PhaseState, str] = {
    PhaseState.PASSED: "[green]PASSED[/green]",
    PhaseState.FAILED: "[bold red]FAILED[/bold red]",
    PhaseState.SKIPPED: "[yellow]SKIPPED[/yellow]",
}


class ReportRenderer:
    """Renders phase reports as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_reports(
        self, context: ReleaseContext, reports: Sequence[PhaseReport]
    ) -> Panel:
        table = Table(show_header=True, header_style="bold", expand=True)
        table.add_column("Phase", style="cyan", no_wrap=True)
        table.add_column("State", justify="center")
        table.add_column("Summary")

        for report in reports:
            table.add_row(
                report.display_name,
                _STATE_ICONS[report.state],
                report.summary,
            )

        all_passed = all(r.state != PhaseState.FAILED for r in reports)
        return Panel(
            table,
            title=(
                f"[bold]nimrelease {context.version}[/bold] "
                f"(build {escape(context.build_hash)})"
            ),
            border_style="green" if all_passed else "red",
            padding=(1, 2),
        )

    def print_reports(
        self, context: ReleaseContext, reports: Sequence[PhaseReport]
    ) -> None:
        self.console.print(self.render_reports(context, reports))

    def print_failure(self, message: str) -> None:
        """Print a hard-failure report verbatim (no markup interpretation)."""
        self.console.print(message, markup=False, highlight=False, soft_wrap=True)
