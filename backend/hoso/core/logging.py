"""Structured logging configuration using structlog.

Request handlers bind a ``request_id`` into the structlog context so every
event logged while serving a request carries it.
"""

from __future__ import annotations

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

from hoso.core.config import settings

# Loggers that stay at WARNING regardless of the configured level
QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "PIL", "multipart")


def add_app_info(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with the application name and version."""
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.version)
    return event_dict


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        level: Log level name. Defaults to ``settings.log_level``.
        json_logs: Render JSON lines. Defaults to ``not settings.debug``.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_logs is None:
        json_logs = not settings.debug

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        # Vietnamese messages stay readable in the JSON output
        processors = shared_processors + [
            add_app_info,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If not provided, uses the caller's module name.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None = None, **values: Any) -> str:
    """Start a fresh logging context for one request.

    Returns:
        The request ID in use, generated when not supplied.
    """
    request_id = request_id or uuid.uuid4().hex[:16]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, **values)
    return request_id


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
