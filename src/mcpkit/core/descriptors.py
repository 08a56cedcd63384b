"""Capability descriptors — what the registry stores for each tool, resource, and prompt."""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from mcpkit.core.schema import InputSchema, SchemaDescriptor, build_input_schema
from mcpkit.core.uri_template import UriTemplate


class HandlerKind(str, Enum):
    """Execution shape of a tool handler."""

    PLAIN = "plain"
    PROGRESS = "progress"
    CALLBACK = "callback"


def handler_kind(handler: Callable[..., Any]) -> HandlerKind:
    """Infer the execution shape from the handler's definition."""
    if inspect.isgeneratorfunction(handler) or inspect.isasyncgenfunction(handler):
        return HandlerKind.PROGRESS
    if inspect.iscoroutinefunction(handler):
        return HandlerKind.CALLBACK
    return HandlerKind.PLAIN


def positional_arity(handler: Callable[..., Any]) -> int:
    """Number of positional arguments *handler* can take (``*args`` counts as many)."""
    try:
        params = inspect.signature(handler).parameters.values()
    except (TypeError, ValueError):
        return 1
    count = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return 2
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _describe(handler: Callable[..., Any], description: str | None) -> str:
    if description is not None:
        return description
    attr = getattr(handler, "description", None)
    if isinstance(attr, str):
        return attr
    doc = inspect.getdoc(handler) or ""
    return doc.split("\n\n", 1)[0].strip()


def _freeze_input(handler: Callable[..., Any], input: InputSchema | None) -> Mapping[str, SchemaDescriptor]:
    declared = input if input is not None else getattr(handler, "input", None)
    return MappingProxyType(dict(declared or {}))


@dataclass(frozen=True)
class ToolDescriptor:
    """A registered tool."""

    name: str
    handler: Callable[..., Any]
    description: str = ""
    input_schema: Mapping[str, SchemaDescriptor] = field(default_factory=lambda: MappingProxyType({}))
    kind: HandlerKind = HandlerKind.PLAIN
    arity: int = 1

    @classmethod
    def from_handler(
        cls,
        name: str,
        handler: Callable[..., Any],
        *,
        description: str | None = None,
        input: InputSchema | None = None,
    ) -> ToolDescriptor:
        """Build a descriptor, falling back to handler attributes and docstring."""
        return cls(
            name=name,
            handler=handler,
            description=_describe(handler, description),
            input_schema=_freeze_input(handler, input),
            kind=handler_kind(handler),
            arity=min(positional_arity(handler), 2),
        )

    @property
    def accepts_context(self) -> bool:
        return self.arity >= 2

    @property
    def json_schema(self) -> dict[str, Any]:
        return build_input_schema(self.input_schema)


@dataclass(frozen=True)
class ResourceDescriptor:
    """A registered resource, addressed by an exact URI or a URI template."""

    uri_pattern: str
    handler: Callable[..., Any]
    name: str = ""
    description: str = ""
    mime_type: str = "text/plain"
    template: UriTemplate = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "template", UriTemplate(self.uri_pattern))

    @classmethod
    def from_handler(
        cls,
        uri_pattern: str,
        handler: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
        mime_type: str | None = None,
    ) -> ResourceDescriptor:
        return cls(
            uri_pattern=uri_pattern,
            handler=handler,
            name=name or getattr(handler, "__name__", uri_pattern),
            description=_describe(handler, description),
            mime_type=mime_type or getattr(handler, "mime_type", None) or "text/plain",
        )

    @property
    def is_template(self) -> bool:
        return self.template.is_template


@dataclass(frozen=True)
class PromptDescriptor:
    """A registered prompt."""

    name: str
    handler: Callable[..., Any]
    description: str = ""
    input_schema: Mapping[str, SchemaDescriptor] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_handler(
        cls,
        name: str,
        handler: Callable[..., Any],
        *,
        description: str | None = None,
        input: InputSchema | None = None,
    ) -> PromptDescriptor:
        return cls(
            name=name,
            handler=handler,
            description=_describe(handler, description),
            input_schema=_freeze_input(handler, input),
        )
