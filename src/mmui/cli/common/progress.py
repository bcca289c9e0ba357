"""Progress display for pending lifecycle requests."""

from __future__ import annotations

import time
from concurrent.futures import Future
from typing import Mapping

from rich.console import Group
from rich.live import Live
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from mmui.cli.common.output import console

_MAX_LABEL_WIDTH = 56


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _display_label(entity: str, action: str, *, width: int) -> str:
    """Render `<entity>  (<action>)` with the action column aligned."""
    return f"{_truncate(entity, _MAX_LABEL_WIDTH).ljust(width)}  ({action})"


def wait_for_requests_with_progress(
    requests: Mapping[str, Future[bool]],
    action: str,
    poll_interval: float = 0.1,
) -> list[tuple[str, bool]]:
    """
    Wait for pending lifecycle requests. Shows:
      - an overall progress bar (x/y completed + failures)
      - per-entity spinner rows that stop when the request completes

    Returns list of (entity, succeeded) in the order given.
    """
    width = max((len(_truncate(e, _MAX_LABEL_WIDTH)) for e in requests), default=0)

    overall = Progress(
        TextColumn("[bold]Overall[/]"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("failures=[bold red]{task.fields[failures]}[/]"),
        TimeElapsedColumn(),
        console=console,
    )

    per_entity = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[label]}[/]"),
        TextColumn("[{task.fields[style]}]{task.fields[status]}[/{task.fields[style]}]"),
        TimeElapsedColumn(),
        console=console,
    )

    overall_task_id = overall.add_task("overall", total=max(len(requests), 1), failures=0)
    task_ids = {
        entity: per_entity.add_task(
            "",
            total=1,
            label=_display_label(entity, action, width=width),
            status="PENDING",
            style="yellow",
        )
        for entity in requests
    }

    results: dict[str, bool] = {}
    failures = 0

    with Live(Group(overall, per_entity), console=console, refresh_per_second=10, transient=True):
        while len(results) < len(requests):
            for entity, future in requests.items():
                if entity in results or not future.done():
                    continue

                ok = future.result()
                results[entity] = ok
                if not ok:
                    failures += 1
                    overall.update(overall_task_id, failures=failures)

                per_entity.update(
                    task_ids[entity],
                    status="DONE" if ok else "FAILED",
                    style="green" if ok else "red",
                    completed=1,
                )
                overall.advance(overall_task_id, 1)

            time.sleep(poll_interval)

        overall.update(overall_task_id, completed=len(requests))

    return [(entity, results[entity]) for entity in requests]
