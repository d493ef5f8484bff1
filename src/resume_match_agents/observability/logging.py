"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

if TYPE_CHECKING:
    from resume_match_core.config.settings import Settings

# Libraries that log every request or statement at INFO/DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "sqlalchemy.engine", "sentence_transformers")


def configure_logging(settings: Settings) -> None:
    """Configure structlog with JSON or console rendering.

    Stdlib records (SQLAlchemy, httpx, anthropic) go through the same
    processor chain, so one invocation produces a single log format.
    Logs are written to stderr; command output owns stdout.
    """
    shared_processors = _shared_processors()
    level = _resolve_level(settings.log_level)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_render_processors(settings.log_format),
        ],
        foreign_pre_chain=shared_processors,
    )
    _install_root_handler(formatter, level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_request_context(**ids: str) -> None:
    """Bind request identifiers (application_id, user, ...) to subsequent log entries."""
    bind_contextvars(**{key: value for key, value in ids.items() if value})


def clear_request_context() -> None:
    """Clear all bound context variables."""
    clear_contextvars()


def _shared_processors() -> list[structlog.types.Processor]:
    """Processors applied to both structlog and stdlib records."""
    return [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _render_processors(log_format: str) -> list[structlog.types.Processor]:
    """Final rendering step; JSON output carries tracebacks as structured data."""
    if log_format == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer()]


def _install_root_handler(formatter: logging.Formatter, level: int) -> None:
    """Replace root handlers with a single stderr handler."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def _resolve_level(level_name: str) -> int:
    """Map a level name to its logging constant, defaulting to INFO."""
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else logging.INFO
