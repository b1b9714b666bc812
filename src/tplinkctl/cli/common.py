from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import typer

from tplinkctl.config import Settings, get_settings, resolve_config_path
from tplinkctl.errors import InvalidAddressError
from tplinkctl.models import Endpoint, parse_endpoints
from tplinkctl.output import OutputFormat, render
from tplinkctl.output.formatter import Shaped

logger = logging.getLogger(__name__)

NEVER = "never"


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def parse_endpoints_or_exit(addresses: list[str], default_port: int) -> list[Endpoint]:
    try:
        return parse_endpoints(addresses, default_port)
    except InvalidAddressError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def parse_timeout(value: str | None, default: float) -> float | None:
    """``None`` means use ``default``; ``"never"`` disables the timeout."""
    if value is None:
        return default
    if value.strip().lower() == NEVER:
        return None
    try:
        seconds = float(value)
    except ValueError as exc:
        raise typer.BadParameter(
            f"expected seconds or '{NEVER}', got {value!r}", param_hint="--timeout"
        ) from exc
    if seconds <= 0:
        raise typer.BadParameter("must be positive", param_hint="--timeout")
    return seconds


def output_format(ctx: typer.Context) -> OutputFormat:
    fmt = ctx.obj
    if isinstance(fmt, OutputFormat):
        return fmt
    return OutputFormat.SHORT


def emit(shaped: Sequence[Shaped], fmt: OutputFormat) -> None:
    """Print the one document this invocation produces."""
    if not shaped and fmt is not OutputFormat.JSON:
        logger.warning("No devices to show")
        return
    typer.echo(render(shaped, fmt))
