"""
Diagnostics for ulog itself.

Sink failures never reach callers; they are reported here instead. The
loggers wrap the stdlib `ulog` logger directly and stay silent unless the
application attaches a handler.
"""

from __future__ import annotations

import logging

import structlog

ROOT_LOGGER_NAME = "ulog"


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger routed to the stdlib `ulog` hierarchy."""
    if name and name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return structlog.wrap_logger(
        logging.getLogger(name or ROOT_LOGGER_NAME),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )
