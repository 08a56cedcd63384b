"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from mcpkit.core.registry import CapabilityRegistry  # noqa: TC001

console = Console()


def registry_summary(registry: CapabilityRegistry) -> dict[str, Any]:
    """Plain-data view of everything registered, as the wire listings show it."""
    return {
        "tools": [
            {"name": t.name, "description": t.description, "kind": t.kind.value, "inputSchema": t.json_schema}
            for t in registry.list_tools()
        ],
        "resources": [
            {"uri": r.uri_pattern, "name": r.name, "description": r.description, "mimeType": r.mime_type}
            for r in registry.list_resources()
        ],
        "resourceTemplates": [
            {"uriTemplate": r.uri_pattern, "name": r.name, "description": r.description, "mimeType": r.mime_type}
            for r in registry.list_resource_templates()
        ],
        "prompts": [
            {"name": p.name, "description": p.description, "arguments": list(p.input_schema)}
            for p in registry.list_prompts()
        ],
    }


def print_registry(registry: CapabilityRegistry, *, as_json: bool = False) -> None:
    """Pretty-print the registered capabilities."""
    summary = registry_summary(registry)
    if as_json:
        console.print_json(json.dumps(summary))
        return

    tools = Table(title="Tools")
    tools.add_column("Name", style="cyan", no_wrap=True)
    tools.add_column("Kind", no_wrap=True)
    tools.add_column("Arguments")
    tools.add_column("Description")
    for tool in summary["tools"]:
        required = set(tool["inputSchema"].get("required", []))
        args = ", ".join(
            f"{name}*" if name in required else name for name in tool["inputSchema"]["properties"]
        )
        tools.add_row(tool["name"], tool["kind"], args or "-", _truncate(tool["description"]))
    console.print(tools)

    resources = Table(title="Resources")
    resources.add_column("URI", style="cyan", no_wrap=True)
    resources.add_column("Name")
    resources.add_column("MIME type", no_wrap=True)
    resources.add_column("Description")
    for resource in summary["resources"]:
        resources.add_row(resource["uri"], resource["name"], resource["mimeType"], _truncate(resource["description"]))
    for template in summary["resourceTemplates"]:
        resources.add_row(
            template["uriTemplate"], template["name"], template["mimeType"], _truncate(template["description"])
        )
    console.print(resources)

    prompts = Table(title="Prompts")
    prompts.add_column("Name", style="cyan", no_wrap=True)
    prompts.add_column("Arguments")
    prompts.add_column("Description")
    for prompt in summary["prompts"]:
        prompts.add_row(prompt["name"], ", ".join(prompt["arguments"]) or "-", _truncate(prompt["description"]))
    console.print(prompts)


def print_response(status: int, body: Any) -> None:
    """Pretty-print a JSON-RPC response received over HTTP."""
    style = "green" if 200 <= status < 300 else "red"
    console.print(f"[{style}]HTTP {status}[/{style}]")
    if body is None:
        console.print("(no body)")
    elif isinstance(body, str):
        console.print(body, markup=False, highlight=False)
    else:
        console.print_json(json.dumps(body))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
