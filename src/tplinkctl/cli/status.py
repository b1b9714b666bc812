from __future__ import annotations

import asyncio
from typing import Annotated

import typer

from tplinkctl.core import query_status, run_batch
from tplinkctl.output import shape_status

from .common import emit, load_settings_or_exit, output_format, parse_endpoints_or_exit


def register(app: typer.Typer) -> None:
    @app.command()
    def status(
        ctx: typer.Context,
        addresses: Annotated[
            list[str],
            typer.Argument(help="Device addresses (host or host:port)."),
        ],
    ) -> None:
        """Given device addresses, return info and status."""
        settings = load_settings_or_exit()
        endpoints = parse_endpoints_or_exit(addresses, settings.query.port)
        fmt = output_format(ctx)

        outcomes = asyncio.run(run_batch(endpoints, query_status, settings.query))
        emit([shape_status(fmt, outcome) for outcome in outcomes], fmt)
