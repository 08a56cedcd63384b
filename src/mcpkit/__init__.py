"""mcpkit — a small framework for serving MCP tools, resources, and prompts over HTTP."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpkit.config import ServerSettings as ServerSettings
    from mcpkit.core.conversation import conversation as conversation
    from mcpkit.core.progress import create_progress as create_progress
    from mcpkit.core.schema import T as T
    from mcpkit.server import McpServer as McpServer
    from mcpkit.server import create_server as create_server
    from mcpkit.utils.logsink import log as log

_EXPORTS = {
    "McpServer": "mcpkit.server",
    "create_server": "mcpkit.server",
    "ServerSettings": "mcpkit.config",
    "T": "mcpkit.core.schema",
    "conversation": "mcpkit.core.conversation",
    "create_progress": "mcpkit.core.progress",
    "log": "mcpkit.utils.logsink",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpkit' has no attribute {name!r}")
