"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

# stdlib loggers routed into the JSON stream, with their minimum level
_FOREIGN_LOGGERS = {
    "uvicorn": None,
    "uvicorn.error": None,
    "uvicorn.access": None,
    # httpx logs every engine call at INFO
    "httpx": logging.WARNING,
}


def configure_logging(debug: bool = False) -> None:
    """Render application, access and report events as JSON lines.

    Events carry the request context bound by the request logging
    middleware. Report records are told apart by
    ``logger="chatsearch.report"``.

    Args:
        debug: Also emit debug events such as composed engine queries.
    """
    level = logging.DEBUG if debug else logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name, minimum in _FOREIGN_LOGGERS.items():
        foreign = logging.getLogger(name)
        foreign.handlers = []
        foreign.propagate = True
        if minimum is not None:
            foreign.setLevel(max(minimum, level))
