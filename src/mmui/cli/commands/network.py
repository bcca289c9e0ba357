"""Commands for inspecting source networks and their target placement."""

import typer

from mmui.cli.common.context import AppContext, build_context
from mmui.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit
from mmui.cli.common.options import InsecureOpt, PageOpt, PerPageOpt, SortOpt, UrlOpt
from mmui.cli.common.output import out
from mmui.cli.common.paging import build_page
from mmui.core.adapters.migration_api import APIError
from mmui.core.views import instances_table, network_overview, networks_table

app = typer.Typer(
    help="Inspect networks; overridden placement shows next to the struck-through original.",
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
def list_networks(
    ctx: typer.Context,
    sort: list[str] = SortOpt,
    page: int = PageOpt,
    per_page: int = PerPageOpt,
):
    """
    List networks.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading networks..."):
            networks = appctx.api.list_networks()
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading networks")

    if not networks:
        warn_exit("No networks found", code=0)

    try:
        shown = build_page(networks_table(networks), sort=sort, page=page, per_page=per_page)
    except ValueError as exc:
        die(str(exc), code=EXIT_USAGE)

    out.page_table(shown, title="Networks")


@app.command()
def show(ctx: typer.Context, uuid: str = typer.Argument(..., help="Network UUID")):
    """
    Show a network and the instances attached to it.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status(f"Loading network {uuid}..."):
            network = appctx.api.get_network(uuid)
            instances = appctx.api.list_network_instances(uuid)
    except APIError as exc:
        exit_from_exc(exc, message=f"Error while loading network {uuid}")

    out.header(f"Network {network.uuid}")
    out.kv(network_overview(network))

    if instances:
        shown = build_page(instances_table(instances), sort=[], page=1, per_page=100)
        out.page_table(shown, title="Instances")
