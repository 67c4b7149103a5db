"""
Central logging configuration for the project store.

Provides:
- Structured logging (JSON in production, human-readable in development)
- Operation correlation via contextvars (set with correlation_scope)
- Environment-aware log levels

Usage:
    from projectstore.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Version added", extra={"project_id": pid, "version": 3})
"""

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

# Correlation id of the current caller operation
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Attributes passed via extra= by the stores, plus the bound correlation id
CONTEXT_FIELDS = ("correlation_id", "project_id", "version", "user", "uploader")


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context, if set."""
    return correlation_id_var.get()


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Bind a correlation ID for every log line emitted inside the block.

    Orchestrator processes wrap a unit of work (an upload, a cleanup sweep)
    so the store's log lines can be joined with their own.
    """
    value = correlation_id or str(uuid.uuid4())
    token = correlation_id_var.set(value)
    try:
        yield value
    finally:
        correlation_id_var.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Filter that adds correlation_id to log records from context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line; carries the store's context fields when present."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None and value != "-":
                log_obj[key] = value
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure process-wide logging: JSON lines in production, a short
    human-readable format elsewhere. ``debug`` forces DEBUG.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(CorrelationIdFilter())
    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] corr=%(correlation_id)s %(message)s",
            datefmt="%H:%M:%S",
        ))

    level = logging.DEBUG if debug else logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for name in ("sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
