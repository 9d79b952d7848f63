from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_exposition, render_reading
from services.normalizer import parse_status_page
from settings import get_settings, parse_listen_address


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Run and query the Tasmota Prometheus exporter.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Exporter base URL (defaults to EXPORTER_BASE_URL env or http://localhost:9090).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the exporter to answer.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("serve")
def serve_command(
    listen: Optional[str] = typer.Option(
        None,
        "--listen",
        "-l",
        help="Listen address as [host]:port (defaults to TASMOTA_EXPORTER_LISTEN_ADDR or :9090).",
    ),
) -> None:
    """Run the exporter HTTP service."""
    import uvicorn

    if listen is None:
        settings = get_settings()
        host, port = settings.listen_host, settings.listen_port
    else:
        try:
            host, port = parse_listen_address(listen)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--listen") from exc

    typer.echo(f"Starting tasmota exporter on {host}:{port}")
    # log_config=None keeps the dictConfig applied by app.main.
    uvicorn.run("app.main:app", host=host, port=port, log_config=None)


@app.command("reading")
def reading_command(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Device address as host[:port]."),
) -> None:
    """Show one plug's decoded reading without updating exported metrics."""
    state = _get_state(ctx)
    payload = state.client.get_reading(target)
    render_reading(payload)


@app.command("probe")
def probe_command(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Device address as host[:port]."),
) -> None:
    """Scrape one plug through the exporter and print its samples."""
    state = _get_state(ctx)
    exposition = state.client.probe(target)
    render_exposition(exposition)


@app.command("parse")
def parse_command(
    file: Path = typer.Argument(..., help="Saved status fragment (the body of http://<device>/?m)."),
) -> None:
    """Decode a saved status fragment offline."""
    if not file.exists():
        raise typer.BadParameter(f"File {file} does not exist.")
    if not file.is_file():
        raise typer.BadParameter(f"Path {file} is not a file.")

    reading = parse_status_page(file.read_text(encoding="utf-8"))
    render_reading({"target": file.name, **asdict(reading)})
