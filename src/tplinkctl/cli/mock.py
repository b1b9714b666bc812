from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from tplinkctl.core import run_mock_device
from tplinkctl.models import DEFAULT_PORT


def register(app: typer.Typer) -> None:
    @app.command()
    def mock(
        model: str = typer.Option(
            "HS100(UK)", "--model", "-m", help="Model string to report"
        ),
        alias: str | None = typer.Option(None, "--alias", "-a", help="Device alias"),
        host: str = typer.Option("0.0.0.0", "--host", help="Address to bind"),
        port: int = typer.Option(
            DEFAULT_PORT, "--port", "-p", help="Port to listen on"
        ),
    ) -> None:
        """Run a mock device for development."""
        console = Console(stderr=True)
        console.print(f"Starting mock [cyan]{model}[/cyan] on {host}:{port}...")
        console.print("Press Ctrl+C to stop.\n")

        try:
            asyncio.run(run_mock_device(model=model, alias=alias, host=host, port=port))
        except KeyboardInterrupt:
            console.print("\n[green]Mock device stopped.[/green]")
