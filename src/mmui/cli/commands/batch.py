"""Commands for managing migration batches."""

import typer

from mmui.cli.common.context import AppContext, build_context
from mmui.cli.common.exits import EXIT_USAGE, die, exit_from_exc, ok_exit, warn_exit
from mmui.cli.common.options import (
    InsecureOpt,
    PageOpt,
    PerPageOpt,
    SortOpt,
    UrlOpt,
    WindowOpt,
)
from mmui.cli.common.output import out
from mmui.cli.common.paging import build_page
from mmui.cli.common.progress import wait_for_requests_with_progress
from mmui.cli.tui import preview_expression
from mmui.core.actions import request_batch_action
from mmui.core.adapters.migration_api import APIError
from mmui.core.lifecycle import Action
from mmui.core.views import batch_overview, batches_table, instances_table

app = typer.Typer(
    help="List, inspect, start, stop and reset migration batches.",
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
def list_batches(
    ctx: typer.Context,
    sort: list[str] = SortOpt,
    page: int = PageOpt,
    per_page: int = PerPageOpt,
):
    """
    List batches.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading batches..."):
            batches = appctx.api.list_batches()
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading batches")

    if not batches:
        warn_exit("No batches found", code=0)

    table = batches_table(batches)
    try:
        shown = build_page(table, sort=sort, page=page, per_page=per_page)
    except ValueError as exc:
        die(str(exc), code=EXIT_USAGE)

    out.page_table(shown, title="Batches")


@app.command()
def show(ctx: typer.Context, name: str = typer.Argument(..., help="Batch name")):
    """
    Show a batch and its instances.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status(f"Loading batch {name}..."):
            batch = appctx.api.get_batch(name)
            instances = appctx.api.list_batch_instances(name)
    except APIError as exc:
        exit_from_exc(exc, message=f"Error while loading batch {name}")

    out.header(f"Batch {batch.name}")
    out.kv(batch_overview(batch))

    if instances:
        shown = build_page(instances_table(instances), sort=[], page=1, per_page=100)
        out.page_table(shown, title="Instances")


def _run_batch_action(ctx: typer.Context, names: list[str], action: Action) -> None:
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading batches..."):
            batches = {b.name: b for b in appctx.api.list_batches()}
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading batches")

    missing = [n for n in names if n not in batches]
    if missing:
        die(f"Unknown batch(es): {', '.join(missing)}")

    pending = {}
    for name in dict.fromkeys(names):
        future = request_batch_action(appctx.runner, appctx.api, batches[name], action)
        if future is None:
            status = batches[name].status
            out.warn(
                f"Cannot {action.value} batch {name} in status "
                f"{status.value if status is not None else 'Unknown'}"
            )
            continue
        pending[name] = future

    if not pending:
        warn_exit("Nothing to do", code=0)

    results = wait_for_requests_with_progress(pending, action.value)
    appctx.runner.shutdown()

    if not all(ok for _, ok in results):
        raise typer.Exit(1)


@app.command()
def start(ctx: typer.Context, names: list[str] = typer.Argument(..., help="Batch name(s)")):
    """
    Start batches (allowed when Defined, Stopped or Error).
    """
    _run_batch_action(ctx, names, Action.START)


@app.command()
def stop(ctx: typer.Context, names: list[str] = typer.Argument(..., help="Batch name(s)")):
    """
    Stop batches (allowed when Queued or Running).
    """
    _run_batch_action(ctx, names, Action.STOP)


@app.command()
def reset(ctx: typer.Context, names: list[str] = typer.Argument(..., help="Batch name(s)")):
    """
    Reset running batches.
    """
    _run_batch_action(ctx, names, Action.RESET)


@app.command("preview-expression")
def preview(
    ctx: typer.Context,
    expression: str = typer.Argument("", help="Initial include expression"),
    window: float = WindowOpt,
):
    """
    Interactively edit an include expression with a live match count.
    """
    appctx: AppContext = ctx.obj

    final, state = preview_expression(
        appctx.api.count_instances, default=expression, window=window
    )
    if not final:
        ok_exit("No expression entered")

    if state.value == final and state.result is not None and not state.loading:
        out.success(f"{state.result} instance(s) match: {final}")
        return

    try:
        with out.status("Counting matching instances..."):
            matches = appctx.api.count_instances(final)
    except APIError as exc:
        exit_from_exc(exc, message="Error while evaluating expression")
    out.success(f"{matches} instance(s) match: {final}")
