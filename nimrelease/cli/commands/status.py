"""``nimrelease status`` and ``nimrelease verify VERSION``.

Read-only views of what the pipeline has published: the stable channel
record, where the ``docs`` link points, and whether downloaded artifacts
still match their recorded checksums.
"""

from __future__ import annotations

import os

import typer
from rich.console import Console
from rich.table import Table

from nimrelease.core.hasher import verify_checksum
from nimrelease.models.artifacts import (
    DEFAULT_ARTIFACTS,
    checksum_name,
    gzip_tarball_name,
)
from nimrelease.models.versioning import ReleaseVersion, VersionFormatError
from nimrelease.stages.channel import ChannelUpdatePhase

console = Console()


def status_cmd(ctx: typer.Context) -> None:
    """Show the stable channel and the docs link target."""
    settings = ctx.obj
    try:
        stable = ChannelUpdatePhase(settings).read_stable()
    except VersionFormatError as exc:
        console.print(f"[bold red]Stable channel record is malformed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    link = settings.docs_symlink
    target = os.readlink(link) if link.is_symlink() else "[dim]not set[/dim]"

    table = Table(title="Published state", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Web root", str(settings.web_root))
    table.add_row("Stable", str(stable))
    table.add_row("docs ->", target)
    console.print(table)


def verify_cmd(
    ctx: typer.Context,
    version: str = typer.Argument(..., help="Release version, e.g. 1.4.8."),
) -> None:
    """Re-hash downloaded artifacts and compare with their .sha256 files."""
    settings = ctx.obj
    try:
        release = ReleaseVersion.parse(version)
    except VersionFormatError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1)

    download_dir = settings.resolved_download_dir
    names = [spec.dest_name(settings.project, release) for spec in DEFAULT_ARTIFACTS]
    names.append(gzip_tarball_name(settings.project, release))

    table = Table(title=f"Artifacts in {download_dir}")
    table.add_column("Artifact", style="cyan")
    table.add_column("Checksum", justify="center")

    all_ok = True
    for name in names:
        path = download_dir / name
        if not path.is_file() or not (download_dir / checksum_name(name)).is_file():
            table.add_row(name, "[yellow]missing[/yellow]")
            all_ok = False
        elif verify_checksum(path):
            table.add_row(name, "[green]ok[/green]")
        else:
            table.add_row(name, "[bold red]MISMATCH[/bold red]")
            all_ok = False

    console.print(table)
    if not all_ok:
        raise typer.Exit(code=1)
