"""Commands for converting between byte counts and human-readable sizes."""

import typer

from mmui.cli.common.output import console
from mmui.core.units import ParseError, bytes_to_human, human_to_bytes

app = typer.Typer(help="Convert sizes the way the console displays them.", no_args_is_help=True)


def _size_arg(value: str) -> int:
    """Parse a size argument, reporting failures as invalid input."""
    try:
        return human_to_bytes(value)
    except ParseError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("to-human")
def to_human(count: int = typer.Argument(..., min=0, help="Byte count")):
    """
    Format a byte count, e.g. 2345637 -> 2.24 MiB.
    """
    console.print(bytes_to_human(count), highlight=False)


@app.command("to-bytes")
def to_bytes(size: str = typer.Argument(..., help="Size such as '120.55 KiB' or '1GB'")):
    """
    Parse a size into bytes, e.g. '120.55 KiB' -> 123443.
    """
    console.print(_size_arg(size), highlight=False)
