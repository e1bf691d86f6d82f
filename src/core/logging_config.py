"""Structured logging configuration.

Storage actions are reported as one event per action with keyword fields,
e.g. ``logger.info("move_committed", destination=...)``. With structlog
installed events are rendered as JSON and handed to stdlib logging, so the
embedding application decides where they go. Without structlog a small
adapter serializes the same events onto a stdlib logger.
"""

from __future__ import annotations

from functools import partialmethod
import json
import logging
from typing import Any

_FALLBACK_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_structlog_ready = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        Logger whose level methods take an event name plus keyword fields.
    """
    try:
        import structlog
    except ImportError:
        return _EventLogger(_fallback_logger(name))

    _ensure_structlog(structlog)
    return structlog.get_logger(name)


def _ensure_structlog(structlog: Any) -> None:
    global _structlog_ready
    if _structlog_ready:
        return
    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.JSONRenderer(default=str, sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _structlog_ready = True


def _fallback_logger(name: str) -> logging.Logger:
    """Attach a stream handler once, only if the host application has none."""
    logger = logging.getLogger(name)
    if not logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FALLBACK_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
    return logger


class _EventLogger:
    """Adapter giving a stdlib logger the ``event, **fields`` call shape."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def log(self, level: int, event: str, **fields: object) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, _encode_event(event, fields))

    debug = partialmethod(log, logging.DEBUG)
    info = partialmethod(log, logging.INFO)
    warning = partialmethod(log, logging.WARNING)
    error = partialmethod(log, logging.ERROR)


def _encode_event(event: str, fields: dict[str, object]) -> str:
    # Paths and exceptions are common field values; str() keeps them encodable.
    return json.dumps({"event": event, **fields}, sort_keys=True, default=str)
