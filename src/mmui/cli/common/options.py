"""Common CLI options for the CLI."""

import typer

from mmui.core.table import DEFAULT_PAGE_SIZE

UrlOpt = typer.Option(
    None,
    "--url",
    "-u",
    help="Migration daemon URL (default: $MMUI_URL or https://localhost:6443)",
)

InsecureOpt = typer.Option(
    False,
    "--insecure",
    "-k",
    help="Skip TLS certificate verification",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable debug logging",
)

SortOpt = typer.Option(
    [],
    "--sort",
    "-s",
    help="Column header to sort by (case-insensitive). Repeat to toggle direction.",
    show_default=False,
)

PageOpt = typer.Option(
    1,
    "--page",
    help="Page to show (clamped to the available pages)",
)

PerPageOpt = typer.Option(
    DEFAULT_PAGE_SIZE,
    "--per-page",
    "-n",
    help="Rows per page (10, 20, 50 or 100)",
)

YesOpt = typer.Option(
    False,
    "--yes",
    "-y",
    help="Do not ask for confirmation",
)

WindowOpt = typer.Option(
    0.5,
    "--window",
    help="Seconds of typing inactivity before the match count is refreshed",
)
