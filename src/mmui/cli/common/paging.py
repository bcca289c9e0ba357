"""Table view construction utilities.

This module translates list-command options (sort columns, page, page size)
into a TableState by replaying them through the same reducer an interactive
front end would use: each ``--sort`` acts like a click on that column's
header, so repeating a column flips its direction.
"""

from typing import Iterable

from mmui.core.table import (
    Page,
    Table,
    TableState,
    render_page,
    set_items_per_page,
    set_page,
    set_sort,
)


def column_index(table: Table, name: str) -> int:
    """
    Resolve a column by header name (case-insensitive) or 1-based position.

    Raises:
        ValueError: If no column matches.
    """
    wanted = name.strip().lower()
    for index, header in enumerate(table.headers):
        if header.lower() == wanted:
            return index
    if wanted.isdigit() and 1 <= int(wanted) <= len(table.headers):
        return int(wanted) - 1
    choices = ", ".join(h for h in table.headers if h)
    raise ValueError(f"Unknown column '{name}'. Choose one of: {choices}")


def build_page(
    table: Table,
    *,
    sort: Iterable[str],
    page: int,
    per_page: int,
) -> Page:
    """
    Build the page to display from list-command options.

    Raises:
        ValueError: If a sort column or the page size is invalid.
    """
    state = set_items_per_page(TableState(), per_page)
    for name in sort:
        state = set_sort(state, column_index(table, name))
    state = set_page(state, page, len(table.rows))
    return render_page(table, state)
