"""Per-request state — the scope the dispatcher opens and the handler context.

A :class:`RequestScope` lives for exactly one JSON-RPC request.  It is bound
to a :class:`~contextvars.ContextVar` so that collaborators such as the
logging sink can correlate records with the in-flight request without it
being threaded through every call.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from mcpkit.core.sampling import Sampling

RequestId = int | str | None

_current_scope: ContextVar[RequestScope | None] = ContextVar("mcpkit_request_scope", default=None)


class RequestScope:
    """Collects the notifications produced while serving one request."""

    def __init__(
        self,
        request_id: RequestId = None,
        *,
        method: str = "",
        progress_token: str | int | None = None,
        log_threshold: int = logging.INFO,
    ) -> None:
        self.request_id = request_id
        self.method = method
        self.progress_token = progress_token
        self.log_threshold = log_threshold
        self._notifications: list[dict[str, Any]] = []

    @property
    def notifications(self) -> list[dict[str, Any]]:
        """Notification envelopes in emission order."""
        return list(self._notifications)

    def notify(self, method: str, params: dict[str, Any]) -> None:
        """Record a JSON-RPC notification envelope."""
        self._notifications.append({"jsonrpc": "2.0", "method": method, "params": params})


def current_scope() -> RequestScope | None:
    """Return the scope of the request being served, if any."""
    return _current_scope.get()


@contextmanager
def request_scope(scope: RequestScope) -> Iterator[RequestScope]:
    """Bind *scope* for the duration of the ``with`` block."""
    token = _current_scope.set(scope)
    try:
        yield scope
    finally:
        _current_scope.reset(token)


@dataclass(frozen=True)
class ToolContext:
    """What a tool handler may use besides its arguments."""

    request_id: RequestId = None
    progress_token: str | int | None = None
    sampling: Sampling = field(default_factory=Sampling.unavailable)
