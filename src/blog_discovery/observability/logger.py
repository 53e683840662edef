"""Structured logging for observability."""

from __future__ import annotations

import logging

import structlog
from structlog.types import EventDict, Processor

from ..config.settings import get_settings

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _service_name(name: str) -> Processor:
    def add_service(_logger, _method, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", name)
        return event_dict

    return add_service


def configure_logging(level: str | None = None) -> None:
    """Configure JSON structured logging.

    `level` overrides the configured log level (dev scripts use this to keep
    output quiet).
    """
    settings = get_settings()
    log_level = _LEVELS.get((level or settings.log_level).upper(), logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        _service_name(settings.service_name),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_discovery_context(base_url: str) -> None:
    """Attach `base_url` to every event logged until the run's context is cleared."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(base_url=base_url)


def clear_discovery_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None):
    return structlog.get_logger(name)
