"""Commands for inspecting instances and their overrides."""

import typer

from mmui.cli.common.context import AppContext, build_context
from mmui.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit
from mmui.cli.common.options import InsecureOpt, PageOpt, PerPageOpt, SortOpt, UrlOpt
from mmui.cli.common.output import out
from mmui.cli.common.paging import build_page
from mmui.core.adapters.migration_api import APIError
from mmui.core.views import disks_table, instance_overview, instances_table, nics_table

app = typer.Typer(
    help="Inspect instances; overridden CPU and memory show next to the struck-through original.",
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
def list_instances(
    ctx: typer.Context,
    sort: list[str] = SortOpt,
    page: int = PageOpt,
    per_page: int = PerPageOpt,
    include: str | None = typer.Option(
        None, "--include", "-i", help="Only instances matching this include expression"
    ),
):
    """
    List instances.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status("Loading instances..."):
            instances = appctx.api.list_instances(include)
    except APIError as exc:
        exit_from_exc(exc, message="Error while loading instances")

    if not instances:
        warn_exit("No instances found", code=0)

    try:
        shown = build_page(instances_table(instances), sort=sort, page=page, per_page=per_page)
    except ValueError as exc:
        die(str(exc), code=EXIT_USAGE)

    out.page_table(shown, title="Instances")


@app.command()
def show(ctx: typer.Context, uuid: str = typer.Argument(..., help="Instance UUID")):
    """
    Show an instance with its overrides, NICs and disks.
    """
    appctx: AppContext = ctx.obj

    try:
        with out.status(f"Loading instance {uuid}..."):
            instance = appctx.api.get_instance(uuid)
    except APIError as exc:
        exit_from_exc(exc, message=f"Error while loading instance {uuid}")

    out.header("General")
    out.kv(instance_overview(instance))

    if instance.nics:
        out.page_table(build_page(nics_table(instance), sort=[], page=1, per_page=100), title="NICs")
    if instance.disks:
        out.page_table(build_page(disks_table(instance), sort=[], page=1, per_page=100), title="Disks")
