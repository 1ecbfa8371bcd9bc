"""Logging configuration and helpers for ezkit.

Two output formats are supported:

* human-readable console lines, and
* one JSON object per line for log shipping.

Library modules log through ``logging.getLogger(__name__)`` using dotted
event names as messages (``directory.role.create``) and pass structured
fields through ``extra=log_context(...)``. Nothing here is configured on
import; applications call :func:`setup_logging` once at startup.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .settings import Settings

# Attributes every LogRecord carries; anything else on a record came in
# through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_CONFIGURED_FLAG = "_ezkit_configured"


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class _EzkitFormatter(logging.Formatter):
    """UTC millisecond timestamps plus access to the record's ``extra`` fields."""

    _time_format = "%Y-%m-%dT%H:%M:%S"

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        return f"{dt.strftime(datefmt or self._time_format)}.{int(record.msecs):03d}Z"

    @staticmethod
    def extras(record: logging.LogRecord) -> dict[str, Any]:
        return {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }


class ConsoleLogFormatter(_EzkitFormatter):
    """Render log records as single-line console output.

    Example line:

        2026-10-19T08:14:03.120Z DEBUG ezkit.directory directory.role.create role=admin
    """

    def __init__(self) -> None:
        super().__init__(fmt="%(asctime)s %(levelname)-5s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        for key, value in sorted(self.extras(record).items()):
            line += f" {key}={'null' if value is None else value}"
        return line


class JsonLogFormatter(_EzkitFormatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": "ezkit",
            "logger": record.name,
            "message": record.getMessage(),
            **self.extras(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, separators=(",", ":"))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def setup_logging(settings: Settings) -> None:
    """Configure root logging for an ezkit-based process.

    Installs a single StreamHandler on the root logger (replacing existing
    handlers the first time) and applies ``settings.log_level`` and
    ``settings.log_format``. Calling it again only swaps the formatter and
    level.
    """
    root_logger = logging.getLogger()

    configured = getattr(root_logger, _CONFIGURED_FLAG, False)
    if not configured or not root_logger.handlers:
        root_logger.handlers = [logging.StreamHandler()]
        setattr(root_logger, _CONFIGURED_FLAG, True)
    else:
        root_logger.handlers = [root_logger.handlers[0]]

    handler = root_logger.handlers[0]
    handler.setFormatter(build_formatter(settings.log_format))
    root_logger.setLevel(getattr(logging, settings.log_level))

    # The library loggers inherit the root level unless told otherwise.
    logging.getLogger("ezkit").setLevel(logging.NOTSET)


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonLogFormatter()
    return ConsoleLogFormatter()


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def _entity_name(value: Any) -> str:
    return str(getattr(value, "name", value))


def log_context(
    *,
    user: Any = None,
    role: Any = None,
    privileges: Iterable[Any] | None = None,
    roles: Iterable[Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a consistent ``extra`` payload for structured logs.

    Entities are reduced to their names so log lines never carry passwords.

    Example:
        logger.debug(
            "directory.user.grant",
            extra=log_context(user=user, privileges=privileges),
        )
    """
    ctx: dict[str, Any] = {}
    if user is not None:
        ctx["user"] = _entity_name(user)
    if role is not None:
        ctx["role"] = _entity_name(role)
    if privileges is not None:
        ctx["privileges"] = ",".join(map(_entity_name, privileges))
    if roles is not None:
        ctx["roles"] = ",".join(map(_entity_name, roles))
    ctx.update(extra)
    return ctx


__all__ = [
    "ConsoleLogFormatter",
    "JsonLogFormatter",
    "build_formatter",
    "log_context",
    "setup_logging",
]
