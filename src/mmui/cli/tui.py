"""Terminal UI utilities for the migration console."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText

from mmui.cli.common.tui_style import PREVIEW_STYLE
from mmui.core.debounce import DEFAULT_WINDOW_SECONDS, DebouncedQuery, QueryState

_MAX_EXPRESSION_WIDTH = 48


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _toolbar_text(state: QueryState[str, int]) -> FormattedText:
    """Format the preview toolbar for the current query state."""
    if not state.value:
        return FormattedText([("class:bottom-toolbar", " Type an include expression")])
    if state.loading:
        return FormattedText([("class:bottom-toolbar.loading", " Counting matching instances...")])
    if state.error:
        return FormattedText([("class:bottom-toolbar.error", f" Invalid expression: {state.error}")])
    if state.result is None:
        return FormattedText([("class:bottom-toolbar", " ...")])
    expr = _truncate(str(state.value), _MAX_EXPRESSION_WIDTH)
    noun = "instance" if state.result == 1 else "instances"
    return FormattedText(
        [
            ("class:bottom-toolbar.count", f" {state.result} {noun}"),
            ("class:bottom-toolbar", f" match '{expr}'"),
        ]
    )


def _feed(query: DebouncedQuery[str, int], text: str) -> None:
    """Send edited text to the query; an emptied buffer resets it."""
    expression = text.strip()
    if expression:
        query.submit(expression)
    else:
        query.clear()


def preview_expression(
    count: Callable[[str], int],
    *,
    default: str = "",
    window: float = DEFAULT_WINDOW_SECONDS,
) -> tuple[str, QueryState[str, int]]:
    """Prompt for an include expression while showing a live match count.

    Each edit is fed to a debounced query, so the daemon is asked only once
    typing pauses for ``window`` seconds.

    Args:
        count: Returns how many instances an expression selects.
        default: Initial expression text.
        window: Quiescence window in seconds.

    Returns:
        The final expression and the last query state.
    """
    query: DebouncedQuery[str, int] = DebouncedQuery(count, window=window)
    session: PromptSession[str] = PromptSession(
        [("class:prompt", "include expression> ")],
        bottom_toolbar=lambda: _toolbar_text(query.snapshot()),
        refresh_interval=0.2,
        style=PREVIEW_STYLE,
    )

    session.default_buffer.on_text_changed += lambda buffer: _feed(query, buffer.text)
    if default:
        query.submit(default)

    try:
        expression = session.prompt(default=default)
    finally:
        query.shutdown(wait=False)
    return expression.strip(), query.snapshot()
