"""Commands for the migration queue."""

import typer

from mmui.cli.common.context import AppContext, build_context
from mmui.cli.common.exits import EXIT_USAGE, die, exit_from_exc, ok_exit, warn_exit
from mmui.cli.common.options import (
    InsecureOpt,
    PageOpt,
    PerPageOpt,
    SortOpt,
    UrlOpt,
    YesOpt,
)
from mmui.cli.common.output import out
from mmui.cli.common.paging import build_page
from mmui.cli.common.progress import wait_for_requests_with_progress
from mmui.core.actions import request_queue_action
from mmui.core.adapters.migration_api import APIError
from mmui.core.lifecycle import QUEUE_ACTIONS, Action, action_states
from mmui.core.views import ActionControls, queue_status_text, queue_table

app = typer.Typer(
    help="Inspect the migration queue and cancel, retry or delete entries.",
    no_args_is_help=True,
)


@app.callback()
def _init(
    ctx: typer.Context,
    url: str | None = UrlOpt,
    insecure: bool = InsecureOpt,
):
    """Initialize the daemon context."""
    ctx.obj = build_context(url, insecure=insecure)


@app.command("list")
def list_queue(
    ctx: typer.Context,
    sort: list[str] = SortOpt,
    page: int = PageOpt,
    per_page: int = PerPageOpt,
):
    """
    List queue entries.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading queue..."):
            entries = appctx.api.list_queue()
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading queue")

    if not entries:
        warn_exit("Queue is empty", code=0)

    table = queue_table(entries)
    try:
        shown = build_page(table, sort=sort, page=page, per_page=per_page)
    except ValueError as exc:
        die(str(exc), code=EXIT_USAGE)

    out.page_table(shown, title="Queue")


@app.command()
def show(ctx: typer.Context, uuid: str = typer.Argument(..., help="Instance UUID")):
    """
    Show a queue entry.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status(f"Loading queue entry {uuid}..."):
            entry = appctx.api.get_queue_entry(uuid)
    except APIError as exc:
        exit_from_exc(exc, message=f"Error while loading queue entry {uuid}")

    out.header(f"Queue entry {entry.instance_uuid}")
    out.kv(
        [
            ("Instance", entry.instance_name),
            ("Batch", entry.batch_name),
            ("Status", queue_status_text(entry)),
            ("Detailed status", entry.migration_status_message),
            ("Target", entry.target_name),
            ("Target project", entry.target_project),
            ("Actions", ActionControls(action_states(entry.migration_status, QUEUE_ACTIONS))),
        ]
    )


def _run_queue_action(ctx: typer.Context, uuids: list[str], action: Action) -> None:
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading queue..."):
            entries = {q.instance_uuid: q for q in appctx.api.list_queue()}
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading queue")

    missing = [u for u in uuids if u not in entries]
    if missing:
        die(f"Unknown queue entr{'y' if len(missing) == 1 else 'ies'}: {', '.join(missing)}")

    pending = {}
    for uuid in dict.fromkeys(uuids):
        future = request_queue_action(appctx.runner, appctx.api, entries[uuid], action)
        if future is None:
            out.warn(
                f"Cannot {action.value} queue entry {uuid} in status "
                f"{queue_status_text(entries[uuid]) or 'Unknown'}"
            )
            continue
        pending[uuid] = future

    if not pending:
        warn_exit("Nothing to do", code=0)

    results = wait_for_requests_with_progress(pending, action.value)
    appctx.runner.shutdown()

    if not all(ok for _, ok in results):
        raise typer.Exit(1)


@app.command()
def cancel(ctx: typer.Context, uuids: list[str] = typer.Argument(..., help="Instance UUID(s)")):
    """
    Cancel queue entries (any status except Canceled).
    """
    _run_queue_action(ctx, uuids, Action.CANCEL)


@app.command()
def retry(ctx: typer.Context, uuids: list[str] = typer.Argument(..., help="Instance UUID(s)")):
    """
    Retry canceled queue entries.
    """
    _run_queue_action(ctx, uuids, Action.RETRY)


@app.command()
def delete(
    ctx: typer.Context,
    uuids: list[str] = typer.Argument(..., help="Instance UUID(s)"),
    yes: bool = YesOpt,
):
    """
    Delete finished or failed queue entries. This cannot be undone.
    """
    if not yes and not out.confirm(
        f"Delete {len(uuids)} queue entr{'y' if len(uuids) == 1 else 'ies'}? This cannot be undone."
    ):
        ok_exit("Cancelled")
    _run_queue_action(ctx, uuids, Action.DELETE)
