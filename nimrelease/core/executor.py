"""External command execution and scoped process state.

Every external tool (wget, git, build scripts, the compiler itself) goes
through a ``CommandRunner`` so the phases can be driven by a fake runner in
tests. Commands run in the current working directory and environment; the
context managers here are the only way phases change either, and they
restore the previous value on every exit path.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shlex
import subprocess
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# Exit status reported when the executable cannot be started at all.
COMMAND_NOT_FOUND = 127


class CommandError(RuntimeError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"{command} (exit status {returncode})")
        self.command = command
        self.returncode = returncode


class CommandResult(BaseModel):
    """Exit status and (optionally) captured output of one command."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return shlex.join(self.args)

    def check(self) -> CommandResult:
        """Return self, or raise ``CommandError`` on a non-zero exit."""
        if not self.ok:
            raise CommandError(self.command, self.returncode)
        return self


class CommandRunner(Protocol):
    """Runs one external command and reports its exit status."""

    def run(self, args: Sequence[str], *, capture: bool = False) -> CommandResult:
        ...


class SubprocessRunner:
    """``CommandRunner`` backed by ``subprocess.run`` (no shell).

    Output streams straight to the terminal unless *capture* is set, in
    which case stdout and stderr are combined into ``CommandResult.output``.
    """

    def run(self, args: Sequence[str], *, capture: bool = False) -> CommandResult:
        argv = tuple(str(a) for a in args)
        logger.info("$ %s  (cwd=%s)", shlex.join(argv), os.getcwd())
        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.STDOUT if capture else None,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.error("Command not found: %s", argv[0])
            return CommandResult(args=argv, returncode=COMMAND_NOT_FOUND)
        return CommandResult(
            args=argv,
            returncode=proc.returncode,
            output=proc.stdout or "",
        )


# ---------------------------------------------------------------------------
# Scoped process state
# ---------------------------------------------------------------------------


@contextlib.contextmanager
def scoped_env(**values: str) -> Iterator[None]:
    """Temporarily set environment variables.

    Prior values are restored on exit, and variables that did not exist
    before are removed again.
    """
    saved = {key: os.environ.get(key) for key in values}
    os.environ.update(values)
    try:
        yield
    finally:
        for key, old in saved.items():
            if old is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = old


def sanitized_path(
    extra_dir: Path | str, base_dirs: Sequence[str]
) -> contextlib.AbstractContextManager[None]:
    """Scope PATH to *extra_dir* followed by a fixed list of system dirs.

    *extra_dir* comes first so freshly built binaries are not shadowed by
    an installation elsewhere on the machine.
    """
    return scoped_env(PATH=os.pathsep.join([str(extra_dir), *base_dirs]))


@contextlib.contextmanager
def working_directory(path: Path | str) -> Iterator[Path]:
    """Change into *path* and always change back afterwards."""
    previous = os.getcwd()
    os.chdir(path)
    try:
        yield Path(path)
    finally:
        os.chdir(previous)
