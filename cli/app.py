from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_analysis, render_login
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor feed monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:5000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("update")
def update_command(ctx: typer.Context) -> None:
    """Ask the service to run one ingestion cycle now."""
    state = _get_state(ctx)
    typer.echo(f"Requesting feed update from {state.config.base_url} ...")
    message = state.client.trigger_update()
    typer.secho(message, fg=typer.colors.GREEN)


@app.command("analysis")
def analysis_command(
    ctx: typer.Context,
    limit: int = typer.Option(10, "--limit", min=1, help="Number of latest readings to show."),
) -> None:
    """Show the predicted temperature and the latest stored readings."""
    state = _get_state(ctx)
    payload = state.client.get_analysis()
    render_analysis(payload, limit=limit)


@app.command("register")
def register_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Account email."),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Account password."
    ),
    full_name: Optional[str] = typer.Option(None, "--full-name", help="Display name."),
    phone: Optional[str] = typer.Option(None, "--phone", help="Contact phone number."),
) -> None:
    """Create a user account."""
    state = _get_state(ctx)
    message = state.client.register(email, password, full_name=full_name, phone=phone)
    typer.secho(message, fg=typer.colors.GREEN)


@app.command("login")
def login_command(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Account email."),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, help="Account password."
    ),
) -> None:
    """Log in and print the issued access token."""
    state = _get_state(ctx)
    payload = state.client.login(email, password)
    render_login(payload)


@app.command("serve")
def serve_command(
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind."),
    port: Optional[int] = typer.Option(None, "--port", help="Port to bind (defaults to PORT env or 5000)."),
) -> None:
    """Run the HTTP service with uvicorn."""
    import uvicorn

    bind_port = port if port is not None else get_settings().port
    uvicorn.run("app.main:app", host=host, port=bind_port)
