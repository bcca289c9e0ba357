"""Commands for inspecting migration targets."""

import typer

from mmui.cli.common.context import AppContext, build_context
from mmui.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit
from mmui.cli.common.options import InsecureOpt, PageOpt, PerPageOpt, SortOpt, UrlOpt
from mmui.cli.common.output import out
from mmui.cli.common.paging import build_page
from mmui.core.adapters.migration_api import APIError
from mmui.core.views import targets_table

app = typer.Typer(help="Inspect the clusters instances are migrated to.", no_args_is_help=True)


@app.callback()
def _init(
    ctx: typer.Context,
    url: str | None = UrlOpt,
    insecure: bool = InsecureOpt,
):
    """Initialize the daemon context."""
    ctx.obj = build_context(url, insecure=insecure)


@app.command("list")
def list_targets(
    ctx: typer.Context,
    sort: list[str] = SortOpt,
    page: int = PageOpt,
    per_page: int = PerPageOpt,
):
    """
    List targets and their connectivity.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading targets..."):
            targets = appctx.api.list_targets()
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading targets")

    if not targets:
        warn_exit("No targets found", code=0)

    try:
        shown = build_page(targets_table(targets), sort=sort, page=page, per_page=per_page)
    except ValueError as exc:
        die(str(exc), code=EXIT_USAGE)

    out.page_table(shown, title="Targets")
