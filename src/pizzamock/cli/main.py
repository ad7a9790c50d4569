"""pizzamock CLI - inspect and exercise the mock storefront backend.

Every ``request`` invocation runs against a fresh simulator, so the command
is a quick way to see exactly what a browser test would get back.
"""

import json
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

import pizzamock
from pizzamock import console as pm_console
from pizzamock.config import get_settings
from pizzamock.exceptions import PizzamockError
from pizzamock.logging import configure_logging, get_logger
from pizzamock.simulator import BackendSimulator

configure_logging(
    level=os.environ.get("PIZZAMOCK_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("PIZZAMOCK_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="pizzamock",
    help="""
    🍕 pizzamock - deterministic mock backend for storefront browser tests

    \b
    Quick start:
      pizzamock routes                       Show the route table in precedence order
      pizzamock users                        Show the seeded accounts
      pizzamock request GET /api/order/menu  Ask a fresh simulator
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
) -> None:
    """pizzamock - deterministic mock backend for storefront browser tests."""
    settings = get_settings()
    json_output = settings.log_format == "json"
    if verbose >= 2:
        configure_logging(level="DEBUG", json_output=json_output)
    elif verbose >= 1:
        configure_logging(level="INFO", json_output=json_output)


@app.command("version")
def version() -> None:
    """Show pizzamock version."""
    console.print(f"[bold cyan]pizzamock[/bold cyan] v{pizzamock.__version__}")


@app.command("routes")
def routes() -> None:
    """List mocked routes in the order they are matched."""
    simulator = BackendSimulator()
    table = Table(title="Routes (first match wins)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Pattern", style="cyan")
    table.add_column("Name")
    table.add_column("Methods", style="green")
    for position, route in enumerate(simulator.dispatcher.routes, start=1):
        methods = getattr(route.handler, "methods", ())
        table.add_row(str(position), route.pattern.template, route.name, ", ".join(methods))
    console.print(table)


@app.command("users")
def users() -> None:
    """List the seeded accounts."""
    simulator = BackendSimulator()
    table = Table(title="Seeded users")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Email", style="cyan")
    table.add_column("Password", style="dim")
    table.add_column("Roles", style="green")
    for user in simulator.fixtures.users.values():
        table.add_row(user.id, user.name, user.email, user.password, ", ".join(user.roles))
    console.print(table)


@app.command("request")
def request(
    method: Annotated[str, typer.Argument(help="HTTP method, e.g. GET or PUT")],
    path: Annotated[str, typer.Argument(help="Path with optional query, e.g. /api/franchise?name=lota")],
    json_body: Annotated[
        str | None,
        typer.Option("--json", "-j", help="JSON request body"),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option("--token", "-t", help="Bearer token to send"),
    ] = None,
    login: Annotated[
        str | None,
        typer.Option(
            "--login",
            "-l",
            help="Log in first as EMAIL:PASSWORD and send the issued token",
        ),
    ] = None,
    har: Annotated[
        Path | None,
        typer.Option("--har", help="Also write the exchange as a HAR file"),
    ] = None,
) -> None:
    """Send one request to a fresh simulator and print the response."""
    body = None
    if json_body is not None:
        try:
            body = json.loads(json_body)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON: {exc.msg}", param_hint="--json") from exc

    simulator = BackendSimulator()
    if login is not None:
        email, sep, password = login.partition(":")
        if not sep:
            raise typer.BadParameter("Expected EMAIL:PASSWORD", param_hint="--login")
        try:
            _user, token = simulator.session.login(email, password)
        except PizzamockError as exc:
            pm_console.error(f"Login failed for {email}: {exc.message}")
            raise typer.Exit(1) from exc
        pm_console.info(f"Logged in as {email}")

    response = simulator.request(method, path, json=body, token=token)
    if har is not None:
        pm_console.success(f"Wrote {simulator.export_har(har)}")
    if response is None:
        pm_console.info(f"{method.upper()} {path} is not mocked (would pass through)")
        raise typer.Exit(2)

    style = "green" if response.status < 400 else "red"
    pm_console.err_console.print(f"[{style}]{response.status}[/{style}]")
    if response.body is not None:
        pm_console.print_json(response.body)
    if response.status >= 400:
        raise typer.Exit(1)


@app.command("config")
def config() -> None:
    """Show current pizzamock configuration."""
    settings = get_settings()
    lines = [f"[dim]{name}:[/dim] {value}" for name, value in settings.as_display_dict().items()]
    console.print(Panel("\n".join(lines), title="⚙ Configuration", border_style="cyan"))


if __name__ == "__main__":
    app()
