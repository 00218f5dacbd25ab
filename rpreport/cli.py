"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rpreport import __version__
from rpreport.client import ReportPortalClient, new_client
from rpreport.core.config import init_app_config
from rpreport.exceptions import ReportPortalError

console = Console()

app = typer.Typer(help="RPREPORT - ReportPortal reporting client")

logger = logging.getLogger("rpreport.cli")


def configure_app(debug: bool = False):
    """
    Configure the application with the specified settings.

    Args:
    ----
        debug: Whether to enable debug mode

    """
    config = init_app_config(debug=debug, app_version=__version__)
    config.configure_logging()
    return config


@app.callback(invoke_without_command=True)
def callback(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode with verbose logging"),
    version: bool = typer.Option(False, "--version", help="Show the application version and exit"),
):
    """
    RPREPORT - report test runs to ReportPortal.

    Connection options default to the RPREPORT_ENDPOINT, RPREPORT_PROJECT,
    RPREPORT_TOKEN and RPREPORT_API_VERSION environment variables.
    """
    if version:
        console.print(f"RPREPORT version: {__version__}")
        raise typer.Exit()

    configure_app(debug=debug)

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


def build_client(endpoint: str, project: str, token: str, api_version: int) -> ReportPortalClient:
    """Create a client from command line options."""
    logger.debug(f"Creating client for project '{project}' at {endpoint}")
    return new_client(endpoint, project, token, api_version=api_version)


@app.command("check-connection")
def check_connection(
    endpoint: str = typer.Option(..., envvar="RPREPORT_ENDPOINT", help="ReportPortal endpoint"),
    token: str = typer.Option(..., envvar="RPREPORT_TOKEN", help="ReportPortal access token"),
    project: str = typer.Option("", envvar="RPREPORT_PROJECT", help="ReportPortal project name"),
    api_version: int = typer.Option(1, envvar="RPREPORT_API_VERSION", help="API version"),
):
    """
    Check that ReportPortal is reachable and accepts the token.
    """
    client = build_client(endpoint, project, token, api_version)
    try:
        console.print(f"Checking connection to {client.endpoint}")
        client.check_connect()
        console.print("✅ Connection successful", style="green")
    except ReportPortalError as e:
        console.print(f"❌ Error: {escape(str(e))}", style="red")
        raise typer.Exit(code=1)
    finally:
        client.close()


@app.command("dashboards")
def list_dashboards(
    endpoint: str = typer.Option(..., envvar="RPREPORT_ENDPOINT", help="ReportPortal endpoint"),
    token: str = typer.Option(..., envvar="RPREPORT_TOKEN", help="ReportPortal access token"),
    project: str = typer.Option(..., envvar="RPREPORT_PROJECT", help="ReportPortal project name"),
    api_version: int = typer.Option(1, envvar="RPREPORT_API_VERSION", help="API version"),
    output_file: Path | None = typer.Option(None, help="Output file path for dashboards (JSON)"),
):
    """
    List the dashboards of a project.
    """
    client = build_client(endpoint, project, token, api_version)
    try:
        console.print(f"Fetching dashboards for project {project}")
        dashboards = client.get_dashboard()
        console.print(f"Found {len(dashboards)} dashboards")

        if output_file:
            with open(output_file, "w") as f:
                json.dump(
                    [dashboard.model_dump(by_alias=True) for dashboard in dashboards], f, indent=2
                )
            console.print(f"Dashboards written to {output_file}", style="green")
        else:
            table = Table(title=f"Dashboards of {project}")
            table.add_column("ID")
            table.add_column("Name")
            table.add_column("Owner")
            table.add_column("Shared")
            table.add_column("Widgets")

            for dashboard in dashboards:
                table.add_row(
                    dashboard.id,
                    dashboard.name,
                    dashboard.owner,
                    "yes" if dashboard.share else "no",
                    str(len(dashboard.widgets)),
                )

            console.print(table)

    except ReportPortalError as e:
        console.print(f"❌ Error: {escape(str(e))}", style="red")
        raise typer.Exit(code=1)
    finally:
        client.close()


if __name__ == "__main__":
    app()
