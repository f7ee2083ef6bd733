"""Structured logging — JSON in prod, coloured console in dev.

Logs go to stderr: the CLI prints its results on stdout and those must
stay parseable.
"""

from __future__ import annotations

import logging
import sys

import structlog

from config.settings import settings

_configured = False


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog processors and stdlib integration.

    ``level`` and ``json_logs`` override ``LOG_LEVEL`` and the
    ``APP_ENV``-based renderer choice.
    """
    global _configured

    if json_logs is None:
        json_logs = settings.APP_ENV != "dev"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

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
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel((level or settings.LOG_LEVEL).upper())

    structlog.contextvars.bind_contextvars(app=settings.APP_NAME)
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound logger for the given module name, configuring once."""
    if not _configured:
        setup_logging()
    return structlog.get_logger(name)
