"""CLI subcommand registration."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click

    from mcpkit.server import McpServer

DEFAULT_APP = "mcpkit.examples.demo:server"


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from mcpkit.cli_commands.call import call
    from mcpkit.cli_commands.inspect import inspect_cmd
    from mcpkit.cli_commands.serve import serve

    cli.add_command(serve)
    cli.add_command(inspect_cmd)
    cli.add_command(call)


def load_server(target: str) -> McpServer:
    """Import ``module:attribute`` and return the :class:`McpServer` it names.

    Raises:
        ValueError: If *target* is malformed or does not name a server.
    """
    from mcpkit.server import McpServer

    module_path, sep, attr = target.partition(":")
    if not sep or not module_path or not attr:
        raise ValueError(f"Expected 'module:attribute', got {target!r}")

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ValueError(f"Cannot import {module_path}: {exc}") from exc

    obj = getattr(module, attr, None)
    if obj is None:
        raise ValueError(f"{module_path} has no attribute {attr!r}")
    if not isinstance(obj, McpServer):
        raise ValueError(f"{target} is a {type(obj).__name__}, not an McpServer")
    return obj
