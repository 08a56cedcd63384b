"""Conversation builder — multi-turn prompt output from role-scoped helpers.

Typical usage::

    conversation(lambda user, ai: [
        user.say("I'm seeing this error: ..."),
        user.attach(stack_trace, "text/plain"),
        ai.say("Let's debug it step by step."),
    ])

The builder keeps the exact call order; nothing is merged or deduplicated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict

from mcpkit.core.content import AudioContent, ContentItem, ImageContent, PromptMessage, TextContent

Role = Literal["user", "assistant"]
Fragment = Union[PromptMessage, Iterable[PromptMessage], None]


class Speaker:
    """Builds messages for one role."""

    def __init__(self, role: Role) -> None:
        self.role: Role = role

    def say(self, text: str) -> PromptMessage:
        """A plain text turn."""
        return PromptMessage(role=self.role, content=TextContent(text=text))

    def attach(self, data: str, mime_type: str) -> PromptMessage:
        """A turn carrying a payload.

        ``image/*`` and ``audio/*`` data is expected base64-encoded; any
        other type is sent as text tagged with its MIME type.
        """
        content: ContentItem
        if mime_type.startswith("image/"):
            content = ImageContent(data=data, mime_type=mime_type)
        elif mime_type.startswith("audio/"):
            content = AudioContent(data=data, mime_type=mime_type)
        else:
            content = TextContent(text=data, mime_type=mime_type)
        return PromptMessage(role=self.role, content=content)

    def __repr__(self) -> str:
        return f"Speaker({self.role!r})"


class Conversation(BaseModel):
    """An immutable, ordered sequence of prompt messages."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[PromptMessage, ...] = ()

    def __len__(self) -> int:
        return len(self.messages)

    def to_wire(self) -> list[dict[str, Any]]:
        return [message.to_wire() for message in self.messages]


def conversation(build: Callable[[Speaker, Speaker], Iterable[Fragment]]) -> Conversation:
    """Run *build* with ``user`` and ``ai`` speakers and collect its messages.

    Fragments may be messages or iterables of messages (flattened one level);
    ``None`` fragments are skipped so conditional turns can be written inline.
    """
    messages: list[PromptMessage] = []
    for fragment in build(Speaker("user"), Speaker("assistant")):
        if fragment is None:
            continue
        if isinstance(fragment, PromptMessage):
            messages.append(fragment)
            continue
        for message in fragment:
            if not isinstance(message, PromptMessage):
                msg = f"Conversation fragments must be messages, got {type(message).__name__}"
                raise TypeError(msg)
            messages.append(message)
    return Conversation(messages=tuple(messages))


def coerce_prompt_output(value: Any) -> Conversation:
    """Normalise a prompt handler's return value.

    A string becomes a single ``user`` message; a :class:`Conversation` is
    returned unchanged; an iterable of messages is wrapped.
    """
    if isinstance(value, Conversation):
        return value
    if isinstance(value, str):
        return Conversation(messages=(Speaker("user").say(value),))
    if isinstance(value, PromptMessage):
        return Conversation(messages=(value,))
    if isinstance(value, Iterable):
        return conversation(lambda user, ai: [list(value)])
    msg = f"Prompt handlers must return str or Conversation, got {type(value).__name__}"
    raise TypeError(msg)
