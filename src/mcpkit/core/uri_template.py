"""URI templates — segment-wise matching with parameter extraction.

A template is a URI whose ``/``-separated segments are either literals or a
whole-segment placeholder ``{name}``::

    UriTemplate("user://{userId}").match("user://123")  # {"userId": "123"}

Placeholders bind exactly one non-empty segment; segment counts must agree.
"""

from __future__ import annotations

import re

_PLACEHOLDER = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


class UriTemplate:
    """A parsed resource URI pattern (literal or templated)."""

    def __init__(self, pattern: str) -> None:
        self._pattern = pattern
        self._segments: list[tuple[bool, str]] = []
        seen: set[str] = set()
        for segment in pattern.split("/"):
            match = _PLACEHOLDER.match(segment)
            if match is not None:
                name = match.group(1)
                if name in seen:
                    msg = f"Duplicate parameter '{name}' in URI template: {pattern}"
                    raise ValueError(msg)
                seen.add(name)
                self._segments.append((True, name))
            elif "{" in segment or "}" in segment:
                msg = f"Placeholders must occupy a whole path segment: {pattern}"
                raise ValueError(msg)
            else:
                self._segments.append((False, segment))
        self._params = tuple(name for is_param, name in self._segments if is_param)

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def params(self) -> tuple[str, ...]:
        """Placeholder names in the order they appear."""
        return self._params

    @property
    def is_template(self) -> bool:
        return bool(self._params)

    def match(self, uri: str) -> dict[str, str] | None:
        """Return the bound parameters if *uri* matches, else ``None``."""
        parts = uri.split("/")
        if len(parts) != len(self._segments):
            return None

        bound: dict[str, str] = {}
        for (is_param, value), part in zip(self._segments, parts):
            if is_param:
                if not part:
                    return None
                bound[value] = part
            elif part != value:
                return None
        return bound

    def __repr__(self) -> str:
        return f"UriTemplate({self._pattern!r})"
