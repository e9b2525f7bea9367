"""
Bridges that route structlog events and stdlib logging records into a ULog.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import structlog
from structlog.typing import EventDict, WrappedLogger

from .diagnostics import ROOT_LOGGER_NAME
from .types import Severity, StructuredPayload, TemplatePayload

if TYPE_CHECKING:
    from .core import ULog

_METHOD_SEVERITIES = {
    "critical": Severity.ERROR,
    "exception": Severity.ERROR,
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "fatal": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "info": Severity.INFO,
    "msg": Severity.INFO,
    "debug": Severity.DEBUG,
}


def severity_for_levelno(levelno: int) -> Severity:
    """Map a stdlib numeric level onto the four ulog severities."""
    if levelno >= logging.ERROR:
        return Severity.ERROR
    if levelno >= logging.WARNING:
        return Severity.WARNING
    if levelno >= logging.INFO:
        return Severity.INFO
    return Severity.DEBUG


class ULogRenderer:
    """Final structlog processor: emit the event dict as a structured payload.

    The event is dropped afterwards, so the wrapped structlog logger never
    writes anything itself.
    """

    def __init__(self, log: ULog) -> None:
        self._log = log

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        severity = _METHOD_SEVERITIES.get(method_name, Severity.INFO)
        if self._log.enabled_for(severity):
            self._log.emit(severity, StructuredPayload(dict(event_dict)))
        raise structlog.DropEvent


class ULogHandler(logging.Handler):
    """
    Redirect standard library logging records to a ULog instance.
    Records from ulog's own diagnostics are skipped to avoid loops.
    """

    def __init__(self, log: ULog, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._log = log

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == ROOT_LOGGER_NAME or record.name.startswith(ROOT_LOGGER_NAME + "."):
            return
        try:
            severity = severity_for_levelno(record.levelno)
            if not self._log.enabled_for(severity):
                return
            self._log.emit(severity, TemplatePayload("%s", (self.format(record),)))
        except Exception:
            self.handleError(record)


def configure_structlog(log: ULog) -> None:
    """Point structlog's global configuration at `log`."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            ULogRenderer(log),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        context_class=dict,
        logger_factory=structlog.ReturnLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def intercept_stdlib(log: ULog) -> ULogHandler:
    """Replace ulog-managed handlers on the root logger with one for `log`.

    Handlers installed by anything else (pytest caplog, monitoring agents)
    are kept. The root level is opened to DEBUG and `log` does the filtering.
    """
    handler = ULogHandler(log)
    handler._ulog_managed = True  # type: ignore[attr-defined]
    root_logger = logging.getLogger()
    root_logger.handlers = [h for h in root_logger.handlers if not getattr(h, "_ulog_managed", False)]
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)
    return handler
