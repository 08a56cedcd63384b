"""ExecutionEngine — runs any tool handler shape under one contract.

Handler shapes (see :class:`~mcpkit.core.descriptors.HandlerKind`):

* **plain** — ``handler(args)`` returns the value.
* **progress** — a (sync or async) generator yielding
  :class:`~mcpkit.core.progress.Progress` steps before its final value.
* **callback** — a coroutine that may ask the client for sampling through
  ``ctx.sampling``.

Handlers declaring a second positional parameter receive a
:class:`~mcpkit.core.context.ToolContext`.  Whatever the shape, the engine
returns a :class:`~mcpkit.core.content.CallToolResult`; handler failures
become ``isError`` results and never escape as exceptions.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel

from mcpkit.core.content import CONTENT_TYPES, CallToolResult, ContentItem
from mcpkit.core.context import ToolContext
from mcpkit.core.descriptors import HandlerKind, ToolDescriptor
from mcpkit.core.progress import Finished, Progress, StepIterator

logger = logging.getLogger(__name__)

ProgressSink = Callable[[Progress], Awaitable[None] | None]


class ExecutionEngine:
    """Invoke tool handlers and normalise their outcome."""

    async def execute(
        self,
        tool: ToolDescriptor,
        arguments: Mapping[str, Any],
        *,
        on_progress: ProgressSink | None = None,
        context: ToolContext | None = None,
    ) -> CallToolResult:
        """Run *tool* with already-validated *arguments*.

        Progress steps are handed to *on_progress* in emission order, each
        delivery completing before the next step is pulled and all of them
        before this method returns.
        """
        ctx = context or ToolContext()
        args: tuple[Any, ...] = (dict(arguments), ctx)[: tool.arity]

        try:
            if tool.kind is HandlerKind.PROGRESS:
                value = await self._run_steps(tool, args, on_progress)
            elif tool.kind is HandlerKind.CALLBACK:
                value = await tool.handler(*args)
            else:
                value = tool.handler(*args)
                if inspect.isawaitable(value):
                    value = await value
            return coerce_result(value)
        except Exception as exc:
            logger.warning("Tool %s failed: %s", tool.name, exc, exc_info=logger.isEnabledFor(logging.DEBUG))
            return CallToolResult.error(str(exc) or type(exc).__name__)

    @staticmethod
    async def _run_steps(
        tool: ToolDescriptor,
        args: tuple[Any, ...],
        on_progress: ProgressSink | None,
    ) -> Any:
        iterator = StepIterator(tool.handler(*args))
        try:
            while True:
                step = await iterator.next_step()
                if isinstance(step, Finished):
                    return step.value
                logger.debug("Tool %s progress %d/%d", tool.name, step.current, step.total)
                if on_progress is not None:
                    delivered = on_progress(step)
                    if inspect.isawaitable(delivered):
                        await delivered
        finally:
            if not iterator.finished:
                await iterator.close()


def coerce_result(value: Any) -> CallToolResult:
    """Turn a handler's return value into a :class:`CallToolResult`.

    * ``str`` → one text item.
    * A content item, or a list of them → used as-is.
    * Anything else → compact JSON text (pydantic models are dumped first).
    """
    if isinstance(value, CallToolResult):
        return value
    if isinstance(value, str):
        return CallToolResult.from_text(value)
    if isinstance(value, CONTENT_TYPES):
        return CallToolResult(content=[value])
    if isinstance(value, list) and value and all(isinstance(item, CONTENT_TYPES) for item in value):
        items: list[ContentItem] = list(value)
        return CallToolResult(content=items)
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    return CallToolResult.from_text(json.dumps(value, separators=(",", ":"), ensure_ascii=False))
