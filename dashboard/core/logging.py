"""
Structured logging for the dashboard using structlog.

Every entry carries the dashboard's name and version, plus the request id and
a shortened session id of the request being served.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

import structlog
from structlog.types import FilteringBoundLogger, Processor

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
session_id_ctx: ContextVar[str | None] = ContextVar("session_id", default=None)

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def _add_correlation(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    request_id = request_id_ctx.get()
    session_id = session_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    if session_id:
        # The session id doubles as the cookie value, log a prefix only
        event_dict["session"] = session_id[:8]
    return event_dict


def _app_fields(app_name: str, version: str) -> Processor:
    def add_app_fields(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("version", version)
        return event_dict

    return add_app_fields


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    app_name: str = "dashboard",
    version: str = "0.0.0",
) -> None:
    """Configure structlog on top of the stdlib root logger."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    renderer: Processor = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _app_fields(app_name, version),
            _add_correlation,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> FilteringBoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name or __name__)


def new_request_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def request_context(request_id: str, session_id: str | None) -> Iterator[None]:
    """Bind request and session ids to every entry logged inside the block."""
    request_token = request_id_ctx.set(request_id)
    session_token = session_id_ctx.set(session_id)
    try:
        yield
    finally:
        session_id_ctx.reset(session_token)
        request_id_ctx.reset(request_token)
