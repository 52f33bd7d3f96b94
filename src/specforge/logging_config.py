"""structlog setup for the API process.

Modules log through ``logging.getLogger(__name__)``; a single root handler
renders every record through structlog, so library output (uvicorn,
SQLAlchemy, httpx) and application output share one format and carry the
request context bound by the middlewares.
"""

import logging
import sys

import structlog

QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx", "httpcore")


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Install the root handler.

    Args:
        log_level: Level name (debug/info/warning/error); unknown names mean info.
        json_output: JSON lines for log shipping; otherwise the console renderer.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=pre_chain,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(**values: str | None) -> None:
    """Attach non-empty values (trace_id, user_id, ...) to every log line of this request."""
    structlog.contextvars.bind_contextvars(**{key: value for key, value in values.items() if value})


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
