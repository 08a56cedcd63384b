"""Content models — the payload building blocks shared by tools and prompts.

Tool results and prompt messages both carry content items.  Field names are
snake_case in Python and camelCase on the wire; :meth:`WireModel.to_wire`
produces the wire form.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Wire base
# ---------------------------------------------------------------------------


class WireModel(BaseModel):
    """Base model serialised with aliases and without unset optionals."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict using wire (camelCase) field names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Content items
# ---------------------------------------------------------------------------


class TextContent(WireModel):
    """Plain text content item."""

    type: Literal["text"] = "text"
    text: str
    mime_type: str | None = Field(default=None, alias="mimeType")


class ImageContent(WireModel):
    """Inline base64 image content item."""

    type: Literal["image"] = "image"
    data: str
    mime_type: str = Field(alias="mimeType")


class AudioContent(WireModel):
    """Inline base64 audio content item."""

    type: Literal["audio"] = "audio"
    data: str
    mime_type: str = Field(alias="mimeType")


ContentItem = TextContent | ImageContent | AudioContent
CONTENT_TYPES = (TextContent, ImageContent, AudioContent)


# ---------------------------------------------------------------------------
# Tool results
# ---------------------------------------------------------------------------


class CallToolResult(WireModel):
    """The outcome of one tool invocation.

    ``is_error`` is only serialised when set: a failed handler is reported
    as content, not as a JSON-RPC error.
    """

    content: list[ContentItem] = []
    is_error: bool | None = Field(default=None, alias="isError")

    @classmethod
    def from_text(cls, text: str) -> CallToolResult:
        """Create a successful result with a single text item."""
        parts: list[ContentItem] = [TextContent(text=text)]
        return cls(content=parts)

    @classmethod
    def error(cls, message: str) -> CallToolResult:
        """Create a failed result carrying a human-readable message."""
        parts: list[ContentItem] = [TextContent(text=message)]
        return cls(content=parts, is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all text items."""
        return "".join(part.text for part in self.content if isinstance(part, TextContent))


# ---------------------------------------------------------------------------
# Prompt messages
# ---------------------------------------------------------------------------


class PromptMessage(WireModel):
    """A single turn in a prompt conversation."""

    role: Literal["user", "assistant"]
    content: ContentItem
