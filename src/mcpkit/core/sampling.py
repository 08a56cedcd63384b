"""Sampling — a handler's channel back to the client's own LLM.

Handlers never receive a bare callback.  They get a :class:`Sampling`
capability on their :class:`~mcpkit.core.context.ToolContext` and must check
it before use::

    async def smart_answer(args, ctx):
        if ctx.sampling:
            hint = await ctx.sampling.ask("What context would help?")

Transports that can call back into the client supply a
:class:`ClientChannel`; over plain request/response HTTP the capability is
unavailable.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from mcpkit.core.errors import SamplingUnavailableError

logger = logging.getLogger(__name__)

AskFn = Callable[[str], Awaitable[str]]

SAMPLING_METHOD = "sampling/createMessage"


@runtime_checkable
class ClientChannel(Protocol):
    """Sends a server-initiated JSON-RPC request to the connected client."""

    async def request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """Send *method* with *params* and return the client's ``result``."""
        ...


class Sampling:
    """Present-or-absent sampling capability handle."""

    def __init__(self, ask: AskFn | None = None) -> None:
        self._ask = ask

    @classmethod
    def unavailable(cls) -> Sampling:
        return cls(None)

    @classmethod
    def over(cls, channel: ClientChannel, *, max_tokens: int = 1000) -> Sampling:
        """Build a capability that asks via ``sampling/createMessage`` on *channel*."""

        async def ask(prompt: str) -> str:
            params: dict[str, Any] = {
                "messages": [{"role": "user", "content": {"type": "text", "text": prompt}}],
                "maxTokens": max_tokens,
            }
            logger.debug("Requesting sampling from client (%d chars)", len(prompt))
            result = await channel.request(SAMPLING_METHOD, params)
            return _extract_text(result)

        return cls(ask)

    @property
    def available(self) -> bool:
        return self._ask is not None

    def __bool__(self) -> bool:
        return self.available

    async def ask(self, prompt: str) -> str:
        """Ask the client's LLM and return its text reply.

        Raises:
            SamplingUnavailableError: If the transport cannot call the client.
        """
        if self._ask is None:
            raise SamplingUnavailableError()
        return await self._ask(prompt)


def _extract_text(result: dict[str, Any]) -> str:
    """Pull the reply text out of a ``sampling/createMessage`` result."""
    content = result.get("content")
    if isinstance(content, dict) and content.get("type") == "text":
        return str(content.get("text", ""))
    if isinstance(content, list):
        return "\n".join(
            str(item.get("text", "")) for item in content if isinstance(item, dict) and item.get("type") == "text"
        )
    return ""
