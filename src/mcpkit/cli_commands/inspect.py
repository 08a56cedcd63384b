"""``mcpkit inspect`` — list what an MCP server registers."""

from __future__ import annotations

import sys

import click

from mcpkit.cli_commands import DEFAULT_APP, load_server
from mcpkit.cli_commands._output import console, print_registry


@click.command("inspect")
@click.argument("app", default=DEFAULT_APP)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def inspect_cmd(app: str, as_json: bool) -> None:
    """Show the tools, resources, and prompts APP registers.

    APP is ``module:attribute`` naming an McpServer.
    """
    try:
        server = load_server(app)
    except ValueError as exc:
        console.print(f"[red]Cannot load app:[/red] {exc}")
        sys.exit(1)

    if not as_json:
        console.print(f"[bold]{server.name}[/bold] {server.version}")
    print_registry(server.registry, as_json=as_json)
