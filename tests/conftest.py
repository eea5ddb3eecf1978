"""Shared test fixtures for nimrelease."""

from __future__ import annotations

import io
import os
import tarfile
import zipfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from nimrelease.config import ReleaseSettings
from nimrelease.core.executor import CommandResult
from nimrelease.models.context import ReleaseContext


# ---------------------------------------------------------------------------
# Fake command runner
# ---------------------------------------------------------------------------


@dataclass
class RecordedCall:
    """One command as the fake runner saw it."""

    args: tuple[str, ...]
    cwd: Path
    path_env: str
    env: dict[str, str]
    capture: bool


@dataclass
class _Rule:
    prefix: tuple[str, ...]
    returncode: int = 0
    output: str = ""
    effect: Callable[[tuple[str, ...]], None] | None = None


@dataclass
class FakeRunner:
    """CommandRunner that records calls instead of spawning processes.

    ``on(prefix, ...)`` registers a canned result (and optional side effect)
    for every command starting with *prefix*; later rules win. Unmatched
    commands succeed with no output. By default ``wget`` writes a small
    file named after its ``--output-document``.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    rules: list[_Rule] = field(default_factory=list)
    downloads: dict[str, bytes] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.on(("wget",), effect=self._fake_wget)

    def on(
        self,
        prefix: Sequence[str],
        *,
        returncode: int = 0,
        output: str = "",
        effect: Callable[[tuple[str, ...]], None] | None = None,
    ) -> None:
        self.rules.append(_Rule(tuple(prefix), returncode, output, effect))

    def run(self, args: Sequence[str], *, capture: bool = False) -> CommandResult:
        argv = tuple(str(a) for a in args)
        self.calls.append(
            RecordedCall(
                args=argv,
                cwd=Path.cwd(),
                path_env=os.environ.get("PATH", ""),
                env=dict(os.environ),
                capture=capture,
            )
        )
        for rule in reversed(self.rules):
            if argv[: len(rule.prefix)] == rule.prefix:
                if rule.effect is not None:
                    rule.effect(argv)
                return CommandResult(
                    args=argv,
                    returncode=rule.returncode,
                    output=rule.output if capture else "",
                )
        return CommandResult(args=argv, returncode=0)

    @property
    def commands(self) -> list[tuple[str, ...]]:
        return [call.args for call in self.calls]

    def find(self, *prefix: str) -> RecordedCall:
        """Return the first recorded call starting with *prefix*."""
        for call in self.calls:
            if call.args[: len(prefix)] == prefix:
                return call
        raise AssertionError(f"no call starting with {prefix!r} in {self.commands}")

    def _fake_wget(self, argv: tuple[str, ...]) -> None:
        dest = next(a for a in argv if a.startswith("--output-document="))
        name = dest.split("=", 1)[1]
        Path(name).write_bytes(self.downloads.get(name, f"artifact:{name}".encode()))


# ---------------------------------------------------------------------------
# Archive builders
# ---------------------------------------------------------------------------


def make_tar_xz(path: Path, files: dict[str, bytes]) -> Path:
    """Write a .tar.xz containing *files* (archive member name -> content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(path, "w:xz") as archive:
        for name, data in sorted(files.items()):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mtime = 1_600_000_000
            archive.addfile(info, io.BytesIO(data))
    return path


def make_zip(path: Path, files: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in sorted(files.items()):
            archive.writestr(name, data)
    return path


def source_tree_files(version: str = "1.4.8") -> dict[str, bytes]:
    """Minimal contents of a source tarball for *version*."""
    root = f"nim-{version}"
    return {
        f"{root}/build.sh": b"#!/bin/sh\necho building\n",
        f"{root}/koch.nim": b"echo \"koch\"\n",
        f"{root}/bin/.keep": b"",
    }


def docs_archive_files(version: str = "1.4.8") -> dict[str, bytes]:
    """Minimal contents of a Windows zip carrying pre-built docs."""
    root = f"nim-{version}"
    return {
        f"{root}/bin/nim.exe": b"MZ",
        f"{root}/doc/html/overview.html": b"<html>overview</html>",
        f"{root}/doc/html/system.html": b"<html>system</html>",
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Provide a fresh FakeRunner."""
    return FakeRunner()


@pytest.fixture
def settings(tmp_path: Path) -> ReleaseSettings:
    """Provide settings rooted in a temp directory, ignoring .env files."""
    return ReleaseSettings(
        _env_file=None,
        web_root=tmp_path / "www",
        work_dir=tmp_path / "work",
    )


@pytest.fixture
def context() -> ReleaseContext:
    """Provide a deterministic release context."""
    return ReleaseContext.from_args("1.4.8", "2020-10-16-version-1-4-5ab2e4b")


@pytest.fixture
def source_tarball(settings: ReleaseSettings) -> Path:
    """Put a real nim-1.4.8.tar.xz into the download directory."""
    return make_tar_xz(
        settings.resolved_download_dir / "nim-1.4.8.tar.xz", source_tree_files()
    )


@pytest.fixture
def make_release_downloads(tmp_path: Path) -> Callable[[str], dict[str, bytes]]:
    """Factory fixture: archive bytes the fake ``wget`` serves for *version*."""

    def _factory(version: str = "1.4.8") -> dict[str, bytes]:
        staging = tmp_path / "staging" / version
        tarball = f"nim-{version}.tar.xz"
        archive = f"nim-{version}_x64.zip"
        return {
            tarball: make_tar_xz(
                staging / tarball, source_tree_files(version)
            ).read_bytes(),
            archive: make_zip(
                staging / archive, docs_archive_files(version)
            ).read_bytes(),
        }

    return _factory


@pytest.fixture
def release_downloads(
    make_release_downloads: Callable[[str], dict[str, bytes]],
) -> dict[str, bytes]:
    """Downloads for the default 1.4.8 release."""
    return make_release_downloads("1.4.8")


@pytest.fixture
def make_zip_archive() -> Callable[..., Path]:
    """Factory fixture: write a zip (default: a docs-carrying Windows zip)."""

    def _factory(path: Path, files: dict[str, bytes] | None = None) -> Path:
        return make_zip(path, docs_archive_files() if files is None else files)

    return _factory
