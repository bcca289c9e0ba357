"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable

import questionary
from rich.console import Console
from rich.table import Table as RichTable
from rich.text import Text
from rich.theme import Theme

from mmui.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM
from mmui.core.overrides import SUPERSEDED, OverrideDisplay
from mmui.core.table import Cell, Page

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
        "superseded": "strike dim",
    }
)

console = Console(theme=_THEME)


def render_value(value: Any, style_class: str | None = None) -> Text:
    """Render a cell value, striking through superseded originals."""
    if isinstance(value, OverrideDisplay):
        text = Text(value.original, style=SUPERSEDED if value.superseded else "")
        if value.override is not None:
            text.append(" ")
            text.append(value.override, style="bold")
    elif isinstance(value, Text):
        text = value.copy()
    else:
        text = Text("" if value is None else str(value))
    if style_class:
        text.stylize(style_class)
    return text


def render_cell(cell: Cell) -> Text:
    return render_value(cell.renderable, cell.style_class)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts to be MMUI consistent."""
        return f"[mmui] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Iterable[tuple[str, Any]]) -> None:
        """Print label/value pairs, rendering overrides like table cells."""
        for k, v in items:
            line = Text.assemble((f"{k}", "meta"), ": ")
            line.append_text(render_value(v))
            console.print(line)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = questionary.confirm(
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def page_table(self, page: Page, title: str) -> None:
        """
        Render one page of a table, with the sorted column and the page
        position shown in the caption.
        """
        t = RichTable(title=title, show_lines=False)
        state = page.state
        for index, header in enumerate(page.headers):
            label = header
            if state.sort_column == index and state.sort_direction is not None:
                label = f"{header} {'▲' if state.sort_direction.value == 'asc' else '▼'}"
            t.add_column(label, style="ok" if index == 0 else None)

        for row in page.rows:
            t.add_row(*(render_cell(cell) for cell in row))

        t.caption = (
            f"page {page.page}/{page.total_pages} · "
            f"{page.total_rows} row(s) · {state.items_per_page} per page"
        )
        console.print(t)


out = Out()
