"""``mcpkit call`` — send one JSON-RPC request to a running server."""

from __future__ import annotations

import json
import sys
from typing import Any

import click
import httpx

from mcpkit.cli_commands._output import console, print_response


@click.command()
@click.argument("url")
@click.argument("method")
@click.option("--params", "-p", default=None, help="Params as a JSON object.")
@click.option("--id", "request_id", default="1", help="Request id (ignored with --notify).")
@click.option("--notify", is_flag=True, help="Send as a notification (no id).")
@click.option("--timeout", type=float, default=30.0, help="Request timeout in seconds.")
def call(
    url: str,
    method: str,
    params: str | None,
    request_id: str,
    notify: bool,
    timeout: float,
) -> None:
    """POST a METHOD request to the MCP endpoint at URL and print the reply."""
    message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if not notify:
        message["id"] = int(request_id) if request_id.lstrip("-").isdigit() else request_id

    if params:
        try:
            decoded = json.loads(params)
        except json.JSONDecodeError as exc:
            console.print(f"[red]Invalid --params JSON:[/red] {exc}")
            sys.exit(1)
        if not isinstance(decoded, dict):
            console.print("[red]--params must be a JSON object[/red]")
            sys.exit(1)
        message["params"] = decoded

    try:
        response = httpx.post(url, json=message, timeout=timeout)
    except httpx.HTTPError as exc:
        console.print(f"[red]Request failed:[/red] {exc}")
        sys.exit(1)

    body: Any = None
    if response.content:
        try:
            body = response.json()
        except ValueError:
            body = response.text
    print_response(response.status_code, body)
    if response.status_code >= 400:
        sys.exit(1)
