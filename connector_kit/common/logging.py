"""Structured logging setup"""

import logging
import sys
import structlog


def configure_logging(debug: bool = False, json_logs: bool = False) -> None:
    """
    Configure structlog for the process.

    Args:
        debug: Emit DEBUG level events (session state transitions) when True.
        json_logs: Render one JSON object per line instead of the console renderer.
    """
    level = logging.DEBUG if debug else logging.INFO

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = None):
    """Get a structlog logger bound to the given module name"""
    return structlog.get_logger(name)
