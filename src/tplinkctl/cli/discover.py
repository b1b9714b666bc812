from __future__ import annotations

import asyncio
import logging
from typing import Annotated

import typer

from tplinkctl.core import DiscoveryListener
from tplinkctl.core import discover as discover_devices
from tplinkctl.output import shape_discovered

from .common import emit, load_settings_or_exit, output_format, parse_timeout

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    @app.command()
    def discover(
        ctx: typer.Context,
        timeout: Annotated[
            str | None,
            typer.Option(
                "--timeout",
                help="Stop listening after this many seconds, or 'never'.",
                show_default="3",
            ),
        ] = None,
    ) -> None:
        """Discover devices on the local network."""
        settings = load_settings_or_exit()
        seconds = parse_timeout(timeout, settings.discovery.timeout)
        fmt = output_format(ctx)

        listener = DiscoveryListener(settings.query)
        try:
            asyncio.run(discover_devices(listener, seconds, settings.discovery))
        except KeyboardInterrupt:
            logger.info("Discovery stopped")

        found = listener.devices()
        logger.debug("Found %d device(s)", len(found))
        emit([shape_discovered(fmt, device) for device in found], fmt)
