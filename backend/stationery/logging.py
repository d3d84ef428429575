"""Structured logging for services and the admin CLI.

Console output is colored key-value lines; ``LOG_FORMAT=json`` switches to
one JSON object per line for batch runs whose output is collected.
"""

import logging
import sys

import structlog
from structlog.typing import Processor

from stationery.config import settings

# Third-party loggers and the minimum level they are allowed to emit at
_QUIET_LOGGERS = {
    "asyncio": logging.INFO,
    "aiosqlite": logging.WARNING,
    "asyncpg": logging.WARNING,
    "alembic": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
}


def _shared_processors(log_format: str) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso" if log_format == "json" else "%Y-%m-%d %H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty(), exception_formatter=structlog.dev.plain_traceback)


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Route structlog and stdlib records through one stderr handler.

    ``level`` and ``log_format`` default to the ``LOG_LEVEL`` and
    ``LOG_FORMAT`` settings. Stderr keeps CLI summaries on stdout clean.
    """
    level = level or settings.log_level
    log_format = log_format or settings.log_format
    shared = _shared_processors(log_format)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    processors: list[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_format == "json":
        processors.insert(0, structlog.processors.format_exc_info)
    processors.append(_renderer(log_format))

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(foreign_pre_chain=shared, processors=processors))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name, min_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(min_level, root_logger.level))


_configured = False


def setup_logging() -> None:
    """Setup logging once. Safe to call multiple times."""
    global _configured
    if not _configured:
        configure_logging()
        _configured = True
