"""nimrelease CLI - Typer-based command-line interface.

Provides the ``nimrelease`` command with one subcommand per pipeline phase,
``all`` for the full sequence, and ``status``/``verify`` for inspecting the
published state.

All output uses Rich for formatted terminal display.
"""
