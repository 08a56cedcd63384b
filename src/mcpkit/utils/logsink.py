"""Logging sink — leveled records from handlers, correlated with the request.

Handlers log through the module-level :data:`log`::

    from mcpkit import log

    log.info(f"Greeting {name}")
    log.debug({"step": 2, "rows": 118})

Each record goes to the ``mcpkit.handlers`` standard-library logger with the
current request id attached, and is also recorded as an MCP
``notifications/message`` on the in-flight :class:`RequestScope` when its
level reaches the scope's threshold.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any

from pydantic_core import to_jsonable_python

from mcpkit.core.context import current_scope

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

HANDLER_LOGGER = "mcpkit.handlers"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(request_id)s] %(message)s"


class LogLevel(str, Enum):
    """Levels accepted by the logging sink (MCP names)."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"

    @property
    def numeric(self) -> int:
        return _NUMERIC[self]


_NUMERIC: dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: NOTICE,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            scope = current_scope()
            record.request_id = scope.request_id if scope is not None else "-"
        return True


class HandlerLog:
    """The sink handlers write to."""

    def __init__(self, logger_name: str = HANDLER_LOGGER) -> None:
        self._logger = logging.getLogger(logger_name)

    def debug(self, data: Any) -> None:
        self._emit(LogLevel.DEBUG, data)

    def info(self, data: Any) -> None:
        self._emit(LogLevel.INFO, data)

    def notice(self, data: Any) -> None:
        self._emit(LogLevel.NOTICE, data)

    def warning(self, data: Any) -> None:
        self._emit(LogLevel.WARNING, data)

    def error(self, data: Any) -> None:
        self._emit(LogLevel.ERROR, data)

    def _emit(self, level: LogLevel, data: Any) -> None:
        scope = current_scope()
        request_id = scope.request_id if scope is not None else "-"
        text = data if isinstance(data, str) else json.dumps(data, default=str)
        self._logger.log(level.numeric, "%s", text, extra={"request_id": request_id})

        if scope is not None and level.numeric >= scope.log_threshold:
            payload = to_jsonable_python(data, fallback=str)
            scope.notify(
                "notifications/message",
                {"level": level.value, "logger": self._logger.name, "data": payload},
            )


log = HandlerLog()


def configure_logging(level: str | LogLevel = LogLevel.INFO) -> None:
    """Install a root handler whose format includes the request id."""
    numeric = LogLevel(level).numeric
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric)
