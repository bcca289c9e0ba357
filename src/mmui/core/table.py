"""Sortable, paginated tables.

A Table is plain data: headers plus rows of cells, where each cell carries
what to show and, optionally, what to sort by. Everything a list view needs
on top of that (which column is sorted, in which direction, which page is
shown, how many rows fit a page) lives in an immutable TableState. The
functions below take a state and return a new one, so they behave the same
whether they are driven by a CLI, an interactive front end or a test.

Sorting always applies to the whole row set before the current page is
sliced out, and it is stable: rows with equal sort keys keep the order in
which they were given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Sequence

PAGE_SIZES = (10, 20, 50, 100)
DEFAULT_PAGE_SIZE = 20


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Cell:
    """
    One table cell.

    Attributes:
        renderable: Value to display (text, number, or a Rich renderable).
        sort_key: Value used for ordering; defaults to the renderable itself.
        style_class: Optional presentation hint (e.g. "superseded").
    """

    renderable: Any
    sort_key: Any = None
    style_class: str | None = None

    def key(self) -> Any:
        """Return the value this cell sorts by."""
        if self.sort_key is not None:
            return self.sort_key
        return self.renderable


@dataclass(frozen=True)
class Table:
    """Headers plus rows of cells; every row has one cell per header."""

    headers: tuple[str, ...]
    rows: tuple[tuple[Cell, ...], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"Row {index} has {len(row)} cells, expected {width} (one per header)"
                )


@dataclass(frozen=True)
class TableState:
    """View state of a table: 1-based page, page size and optional sort."""

    current_page: int = 1
    items_per_page: int = DEFAULT_PAGE_SIZE
    sort_column: int | None = None
    sort_direction: SortDirection | None = None


@dataclass(frozen=True)
class Page:
    """The slice of a table to render, with the state it was computed from."""

    headers: tuple[str, ...]
    rows: tuple[tuple[Cell, ...], ...]
    page: int
    total_pages: int
    total_rows: int
    state: TableState


def total_pages(row_count: int, items_per_page: int) -> int:
    """Return the number of pages; an empty table still has one page."""
    if items_per_page <= 0:
        raise ValueError("items_per_page must be > 0")
    return max(1, math.ceil(row_count / items_per_page))


def set_sort(state: TableState, column: int) -> TableState:
    """
    Sort by a column, as when its header is clicked.

    Clicking the sorted column again flips between ascending and
    descending; clicking another column sorts it ascending.
    """
    if state.sort_column == column and state.sort_direction is SortDirection.ASC:
        return replace(state, sort_direction=SortDirection.DESC)
    return replace(state, sort_column=column, sort_direction=SortDirection.ASC)


def set_page(state: TableState, page: int, row_count: int) -> TableState:
    """Move to a page, clamped into ``[1, total_pages]``."""
    last = total_pages(row_count, state.items_per_page)
    return replace(state, current_page=min(max(page, 1), last))


def set_items_per_page(state: TableState, items_per_page: int) -> TableState:
    """
    Change the page size.

    The current page is kept as is; ``normalize`` resets it to 1 if it no
    longer exists.
    """
    if items_per_page not in PAGE_SIZES:
        raise ValueError(
            f"items_per_page must be one of {', '.join(str(s) for s in PAGE_SIZES)}"
        )
    return replace(state, items_per_page=items_per_page)


def normalize(state: TableState, row_count: int) -> TableState:
    """Reset to page 1 when the current page is past the end of the data."""
    if state.current_page > total_pages(row_count, state.items_per_page):
        return replace(state, current_page=1)
    return state


def _order_key(value: Any) -> tuple[int, Any]:
    # Numbers before strings before anything else; missing values last.
    if value is None:
        return (3, 0)
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    if isinstance(value, str):
        return (1, value)
    return (2, str(value))


def sort_rows(
    rows: Sequence[tuple[Cell, ...]],
    column: int | None,
    direction: SortDirection | None,
) -> list[tuple[Cell, ...]]:
    """
    Return rows ordered by a column, keeping ties in their original order.

    With no column or direction the rows are returned unchanged.
    """
    if column is None or direction is None:
        return list(rows)

    decorated = [(_order_key(row[column].key()), index, row) for index, row in enumerate(rows)]
    ordered = sorted(decorated, key=lambda item: item[0])
    if direction is SortDirection.DESC:
        # Reverse by key only: group equal keys, then emit groups in reverse.
        groups: list[list[tuple[Any, int, tuple[Cell, ...]]]] = []
        for item in ordered:
            if groups and groups[-1][0][0] == item[0]:
                groups[-1].append(item)
            else:
                groups.append([item])
        ordered = [item for group in reversed(groups) for item in group]
    return [row for _, _, row in ordered]


def visible_rows(table: Table, state: TableState) -> list[tuple[Cell, ...]]:
    """Sort the full row set, then slice out the current page."""
    ordered = sort_rows(table.rows, state.sort_column, state.sort_direction)
    start = (state.current_page - 1) * state.items_per_page
    return ordered[start : start + state.items_per_page]


def render_page(table: Table, state: TableState) -> Page:
    """Apply the render-time page correction and return the page to display."""
    state = normalize(state, len(table.rows))
    return Page(
        headers=table.headers,
        rows=tuple(visible_rows(table, state)),
        page=state.current_page,
        total_pages=total_pages(len(table.rows), state.items_per_page),
        total_rows=len(table.rows),
        state=state,
    )
