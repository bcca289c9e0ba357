"""CLI application for the VM-migration manager console."""

import typer

from mmui.cli.commands.batch import app as batch_app
from mmui.cli.commands.instance import app as instance_app
from mmui.cli.commands.network import app as network_app
from mmui.cli.commands.queue import app as queue_app
from mmui.cli.commands.source import app as source_app
from mmui.cli.commands.target import app as target_app
from mmui.cli.commands.units import app as units_app
from mmui.cli.common.logs import configure_logging
from mmui.cli.common.options import VerboseOpt

app = typer.Typer(
    help="mmui - migration manager console",
    no_args_is_help=True,
)


@app.callback()
def _init(verbose: bool = VerboseOpt):
    """Configure logging for every command."""
    configure_logging(verbose=verbose)


app.add_typer(batch_app, name="batch")
app.add_typer(queue_app, name="queue")
app.add_typer(instance_app, name="instance")
app.add_typer(network_app, name="network")
app.add_typer(source_app, name="source")
app.add_typer(target_app, name="target")
app.add_typer(units_app, name="units")


if __name__ == "__main__":
    app()
