from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from tplinkctl.core import reboot_with_delay, run_batch, switch
from tplinkctl.core.executor import Operation
from tplinkctl.models import ActionOutcome
from tplinkctl.output import shape_actioned

from .common import emit, load_settings_or_exit, output_format, parse_endpoints_or_exit

AddressesArg = Annotated[
    list[str],
    typer.Argument(help="Device addresses (host or host:port)."),
]


def _run_action(
    ctx: typer.Context, addresses: list[str], operation: Operation[ActionOutcome]
) -> None:
    settings = load_settings_or_exit()
    endpoints = parse_endpoints_or_exit(addresses, settings.query.port)
    fmt = output_format(ctx)

    outcomes = asyncio.run(run_batch(endpoints, operation, settings.query))
    emit([shape_actioned(fmt, outcome) for outcome in outcomes], fmt)


def register(app: typer.Typer) -> None:
    @app.command()
    def reboot(
        ctx: typer.Context,
        addresses: AddressesArg,
        delay: Annotated[
            int,
            typer.Option("--delay", min=0, help="Schedule the reboot (in seconds)."),
        ] = 1,
    ) -> None:
        """Reboot one or more devices."""
        _run_action(ctx, addresses, reboot_with_delay(delay))

    @app.command("on")
    def switch_on(ctx: typer.Context, addresses: AddressesArg) -> None:
        """Switch one or more devices on."""
        _run_action(ctx, addresses, switch(True))

    @app.command("off")
    def switch_off(ctx: typer.Context, addresses: AddressesArg) -> None:
        """Switch one or more devices off."""
        _run_action(ctx, addresses, switch(False))
