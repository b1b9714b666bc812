from __future__ import annotations

from typing import Annotated

import typer

from tplinkctl.output import OutputFormat
from tplinkctl.utils.logging import setup_logging

from . import config as config_cmd
from .actions import register as register_actions
from .discover import register as register_discover
from .mock import register as register_mock
from .status import register as register_status

app = typer.Typer(
    help="Discover and interact with TP-Link smart devices on the local network.",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")

register_discover(app)
register_status(app)
register_actions(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Respond with JSON"),
    ] = False,
    long_output: Annotated[
        bool,
        typer.Option("--long", help="Display more information"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """tplinkctl CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"tplinkctl version {get_version('tplinkctl')}")
        raise typer.Exit()

    ctx.obj = OutputFormat.from_flags(json_output, long_output)
