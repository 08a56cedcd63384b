"""McpServer — the registration surface and the servable application.

Usage::

    from mcpkit import T, create_server

    server = create_server(name="demo")

    @server.tool("greet", input={"name": T.string(required=True)})
    def greet(args):
        return f"Hello, {args['name']}!"

    app = server.app  # ASGI application; registration is closed from here on
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import cached_property
from typing import TYPE_CHECKING, Any, TypeVar

from mcpkit.config import ServerSettings
from mcpkit.core.descriptors import PromptDescriptor, ResourceDescriptor, ToolDescriptor
from mcpkit.core.registry import CapabilityRegistry
from mcpkit.core.schema import InputSchema
from mcpkit.protocol.dispatcher import DispatchResult, ProtocolDispatcher
from mcpkit.protocol.models import ServerInfo

if TYPE_CHECKING:
    from fastapi import FastAPI

    from mcpkit.core.sampling import ClientChannel

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class McpServer:
    """Collects tools, resources, and prompts, then serves them."""

    def __init__(
        self,
        name: str = "mcpkit",
        version: str = "0.1.0",
        *,
        instructions: str | None = None,
        settings: ServerSettings | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self.instructions = instructions
        self.settings = settings or ServerSettings(name=name)
        self._registry = CapabilityRegistry()

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def tool(
        self,
        name: str | Callable[..., Any] | None = None,
        handler: Callable[..., Any] | None = None,
        *,
        description: str | None = None,
        input: InputSchema | None = None,
    ) -> Any:
        """Register a tool directly, or return a decorator that does.

        ``server.tool("add", add)``, ``@server.tool("add")`` and bare
        ``@server.tool`` are all accepted; the name defaults to the
        function's ``__name__``.
        """
        if callable(name):
            name, handler = None, name

        def register(fn: F) -> F:
            descriptor = ToolDescriptor.from_handler(
                name or fn.__name__, fn, description=description, input=input
            )
            self._registry.register_tool(descriptor)
            return fn

        return register(handler) if handler is not None else register

    def resource(
        self,
        uri: str,
        handler: Callable[..., Any] | None = None,
        *,
        name: str | None = None,
        description: str | None = None,
        mime_type: str | None = None,
    ) -> Any:
        """Register a resource at an exact URI or a ``{param}`` template."""

        def register(fn: F) -> F:
            descriptor = ResourceDescriptor.from_handler(
                uri, fn, name=name, description=description, mime_type=mime_type
            )
            self._registry.register_resource(descriptor)
            return fn

        return register(handler) if handler is not None else register

    def prompt(
        self,
        name: str | Callable[..., Any] | None = None,
        handler: Callable[..., Any] | None = None,
        *,
        description: str | None = None,
        input: InputSchema | None = None,
    ) -> Any:
        """Register a prompt; same calling forms as :meth:`tool`."""
        if callable(name):
            name, handler = None, name

        def register(fn: F) -> F:
            descriptor = PromptDescriptor.from_handler(
                name or fn.__name__, fn, description=description, input=input
            )
            self._registry.register_prompt(descriptor)
            return fn

        return register(handler) if handler is not None else register

    # ------------------------------------------------------------------
    # Serving
    # ------------------------------------------------------------------

    def configure(self, settings: ServerSettings) -> None:
        """Replace the settings; only allowed before the dispatcher exists."""
        if "dispatcher" in self.__dict__:
            msg = f"Server {self.name!r} is already serving; settings can no longer change"
            raise RuntimeError(msg)
        self.settings = settings

    @cached_property
    def dispatcher(self) -> ProtocolDispatcher:
        """The dispatcher for this server; creating it freezes the registry."""
        return ProtocolDispatcher(
            self._registry,
            server_info=ServerInfo(name=self.name, version=self.version),
            instructions=self.instructions,
            log_level=self.settings.log_level,
        )

    @cached_property
    def app(self) -> FastAPI:
        """The ASGI application serving this server over HTTP."""
        from mcpkit.protocol.http import create_app

        return create_app(self.dispatcher, self.settings)

    async def handle(
        self,
        message: Any,
        *,
        channel: ClientChannel | None = None,
    ) -> DispatchResult:
        """Dispatch one decoded JSON-RPC message without going through HTTP."""
        return await self.dispatcher.dispatch(message, channel=channel)

    def __repr__(self) -> str:
        return f"McpServer(name={self.name!r}, version={self.version!r}, registry={self._registry!r})"


def create_server(
    name: str = "mcpkit",
    version: str = "0.1.0",
    *,
    instructions: str | None = None,
    settings: ServerSettings | None = None,
) -> McpServer:
    """Create an empty :class:`McpServer`."""
    server = McpServer(name, version, instructions=instructions, settings=settings)
    logger.debug("Created server %s %s", name, version)
    return server
