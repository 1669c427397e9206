"""
Structured logging configuration using structlog.

This module sets up structlog for the application loggers and for the optional
image-protocol debug trace.
"""

import logging
import sys
from typing import Any, Callable, Optional

import structlog

from .config import Settings, settings

TRACE_PREFIX = "[img-protocol]"


def setup_logging() -> None:
    """
    Configure structlog for structured logging.

    Sets up processors for:
    - Context variable merging
    - Log level addition
    - Exception info rendering
    - Timestamp addition
    - JSON or console rendering based on settings
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if settings.log_json
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog BoundLogger instance
    """
    return structlog.get_logger(name)


def _prefix_trace(_logger: Any, _method_name: str, rendered: str) -> str:
    return f"{TRACE_PREFIX} {rendered}"


def _append_to_file(path: str) -> Callable[[Any, str, str], str]:
    def processor(_logger: Any, _method_name: str, rendered: str) -> str:
        try:
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(rendered + "\n")
        except OSError:
            pass  # trace file is best effort
        return rendered

    return processor


def get_image_trace_logger(config: Optional[Settings] = None) -> structlog.BoundLogger:
    """
    Get the image-protocol debug trace logger.

    The trace is off unless DEBUG_IMAGE_PROTOCOL (or DEBUG_KITTY_IMAGES) is set.
    When on, every line goes to stdout and, if DEBUG_IMAGE_PROTOCOL_LOG (or
    DEBUG_KITTY_LOG) names a file, is appended there too. Without an explicit
    config the toggles are read from the environment on every call, so they can be
    switched on after import.

    Args:
        config: Settings to read the toggles from (defaults to a fresh Settings())

    Returns:
        structlog BoundLogger; a silent one when tracing is disabled
    """
    config = config or Settings()
    if not config.image_trace_enabled:
        return structlog.wrap_logger(structlog.ReturnLogger(), processors=[])

    processors = [
        structlog.processors.KeyValueRenderer(key_order=["event"]),
        _prefix_trace,
    ]
    if config.debug_image_protocol_log:
        processors.append(_append_to_file(config.debug_image_protocol_log))

    return structlog.wrap_logger(
        structlog.PrintLogger(file=sys.stdout),
        processors=processors,
        wrapper_class=structlog.BoundLogger,
    )
