"""
cli.py

PURPOSE: Command-line interface for the service.
DEPENDENCIES: typer, rich

ARCHITECTURE NOTES:
The CLI provides commands for:
- check: Run the startup checks and wiring, then exit
- call: Make one traced HTTP call through the shared client
- config: Show the effective configuration
"""

import json
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape

from driver_trace_service import __version__
from driver_trace_service.app import Application, bootstrap
from driver_trace_service.config import get_settings
from driver_trace_service.errors import CallerArgumentError, HttpCallError, StartupConfigError

app = typer.Typer(
    name="driver-trace-service",
    help="Microservice bootstrap with traced outbound HTTP calls.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"driver-trace-service version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Driver Trace Service - traced outbound HTTP calls."""
    pass


def print_error(text: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]{escape(text)}[/red]", soft_wrap=True)


def start() -> Application:
    """Bootstrap the service, exiting with status 1 if it cannot start."""
    try:
        return bootstrap(get_settings())
    except StartupConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from None


def parse_params(params: list[str]) -> dict[str, str]:
    """Turn ["a=1", "b=2"] into {"a": "1", "b": "2"}."""
    parsed: dict[str, str] = {}
    for param in params:
        key, sep, value = param.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {param!r}", param_hint="--param")
        parsed[key] = value
    return parsed


def dispatch(application: Application, method: str, url: str, body: Any, variables: dict[str, str]) -> Any:
    """Route a call to the matching client operation."""
    client = application.client
    verb = method.upper()
    if verb == "GET":
        return client.get_for_object(url, None, variables)
    if verb == "POST":
        return client.post_for_object(url, body, None, variables)
    if verb == "PUT":
        return client.put(url, body, variables)
    if verb == "DELETE":
        return client.delete(url, variables)
    return client.exchange(url, verb, body, None, variables)


@app.command()
def check() -> None:
    """Run the startup checks and wiring, then exit."""
    with start() as application:
        console.print(f"[green]{application.settings.application_name} ready[/green]")
        console.print(f"  Host IP: {application.tracer.host_ip}")


@app.command()
def call(
    method: Annotated[
        str,
        typer.Argument(help="HTTP method (GET, POST, PUT, DELETE, ...)"),
    ],
    url: Annotated[
        str,
        typer.Argument(help="Target URL, may contain {name} placeholders"),
    ],
    param: Annotated[
        list[str] | None,
        typer.Option(
            "--param",
            "-p",
            help="URI template variable as key=value (repeatable)",
        ),
    ] = None,
    data: Annotated[
        str | None,
        typer.Option(
            "--data",
            "-d",
            help="JSON request body",
        ),
    ] = None,
) -> None:
    """Make one traced HTTP call through the shared client."""
    variables = parse_params(param or [])

    body: Any = None
    if data is not None:
        try:
            body = json.loads(data)
        except json.JSONDecodeError as e:
            print_error(f"Invalid JSON body: {e}")
            raise typer.Exit(1) from None

    with start() as application:
        try:
            result = dispatch(application, method, url, body, variables)
        except CallerArgumentError as e:
            print_error(f"Invalid argument: {e}")
            raise typer.Exit(1) from None
        except HttpCallError as e:
            print_error(f"HTTP call failed: {e}")
            raise typer.Exit(1) from None

    if result is None:
        return
    if isinstance(result, (dict, list)):
        console.print_json(data=result)
    else:
        console.print(result, markup=False)


@app.command("config")
def config_cmd() -> None:
    """Show the effective configuration."""
    settings = get_settings()
    console.print("[bold]Current Configuration:[/bold]")
    name_status = settings.application_name or "[red](not set)[/red]"
    console.print(f"  Application name: {name_status}")
    console.print(f"  Log level: {settings.log_level}")
    console.print(f"  Debug: {settings.debug}")
    console.print()
    console.print("[bold]HTTP Client Settings:[/bold]")
    console.print(f"  Base URL: {settings.http.base_url or '(none)'}")
    console.print(f"  Timeout: {settings.http.timeout}s")
    console.print(f"  User-Agent: {settings.http.user_agent}")
    console.print()
    console.print("[bold]OpenTelemetry Settings:[/bold]")
    console.print(f"  Enabled: {settings.otel.enabled}")
    console.print(f"  Service name: {settings.otel.service_name}")
    endpoint_status = settings.otel.endpoint if settings.otel.endpoint else "(console only)"
    console.print(f"  Endpoint: {endpoint_status}")


if __name__ == "__main__":
    app()
