"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from mmui.cli.common.output import out

EXIT_FAILURE = 1
EXIT_USAGE = 2


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully with an optional informational message."""
    if msg:
        out.info(msg)
    raise typer.Exit(0)


def die(msg: str, code: int = EXIT_FAILURE) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = EXIT_FAILURE) -> NoReturn:
    """
    Print an error message that includes the underlying exception and exit.

    Keeps the exception chained so --verbose tracebacks stay useful.
    """
    out.error(f"{message}: {exc}")
    raise typer.Exit(code) from exc
