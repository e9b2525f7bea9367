"""
ulog: one log call, up to three sinks.

Provides a process-local logger with:
- file: append-only, path re-resolved from a strftime template (time rotation)
- console: stdout/stderr with optional ANSI colors
- syslog: local socket or remote UDP

Configured with a descriptor string, e.g.
    "file(path=/var/log/app-%Y%m%d.log) console(colors=0) option(level=debug)"

Library: orjson for structured payloads, structlog for bridging and diagnostics.
"""

import logging

from .config import LoggerConfig, parse
from .core import ULog, configure_logging, get_default, set_default, shutdown_logging
from .integrations import ULogHandler, ULogRenderer
from .timefmt import strftime
from .types import (
    Facility,
    LogEvent,
    Severity,
    StructuredPayload,
    TemplatePayload,
    TimeMode,
)

logging.getLogger("ulog").addHandler(logging.NullHandler())

__all__ = [
    "Facility",
    "LogEvent",
    "LoggerConfig",
    "Severity",
    "StructuredPayload",
    "TemplatePayload",
    "TimeMode",
    "ULog",
    "ULogHandler",
    "ULogRenderer",
    "configure_logging",
    "get_default",
    "parse",
    "set_default",
    "shutdown_logging",
    "strftime",
]
