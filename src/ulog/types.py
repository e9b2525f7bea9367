"""
Core value types shared by the parser, the formatters and the sinks.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Literal, Union


ConsoleTarget = Literal["stdout", "stderr"]


class Severity(IntEnum):
    """Log severity, numbered like syslog priorities (lower is more urgent)."""

    ERROR = 3
    WARNING = 4
    INFO = 6
    DEBUG = 7

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_name(cls, name: str) -> Severity | None:
        """Resolve `error`, `warning`, `info` or `debug` (any case)."""
        return _SEVERITY_NAMES.get(name.strip().lower())


_LABELS = {
    Severity.ERROR: "ERRO ",
    Severity.WARNING: "WARN ",
    Severity.INFO: "INFO ",
    Severity.DEBUG: "DBUG ",
}

_SEVERITY_NAMES = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "info": Severity.INFO,
    "debug": Severity.DEBUG,
}

STDLIB_LEVELS = {
    Severity.ERROR: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}


class Facility(IntEnum):
    """Syslog facility codes (unshifted)."""

    KERN = 0
    USER = 1
    DAEMON = 3
    LOCAL0 = 16
    LOCAL1 = 17
    LOCAL2 = 18
    LOCAL3 = 19
    LOCAL4 = 20
    LOCAL5 = 21
    LOCAL6 = 22
    LOCAL7 = 23

    @classmethod
    def from_name(cls, name: str) -> Facility | None:
        """Resolve one of the facility names accepted in descriptors."""
        member = cls.__members__.get(name.strip().upper())
        if member is None or member is cls.KERN:
            return None
        return member


class TimeMode(Enum):
    """Timestamp prefix style for the file and console sinks."""

    NONE = "none"
    DATE = "date"
    TIMESTAMP = "timestamp"


# =============================================================================
# Payloads
# =============================================================================


@dataclass(frozen=True)
class TemplatePayload:
    """A printf-style template with positional arguments."""

    template: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class StructuredPayload:
    """A key/value mapping, serialised to one JSON line on output."""

    mapping: Mapping[Any, Any] = field(default_factory=dict)


Payload = Union[TemplatePayload, StructuredPayload]


def payload_from(layout: Any, args: tuple[Any, ...] = ()) -> Payload:
    """Resolve the public `log.info(layout, *args)` call shape into a payload.

    Mappings become structured payloads (extra args are ignored); anything
    else is used as a template via `str()`.
    """
    if isinstance(layout, Mapping):
        return StructuredPayload(layout)
    if isinstance(layout, str):
        return TemplatePayload(layout, args)
    return TemplatePayload(str(layout), args)


@dataclass(frozen=True)
class LogEvent:
    """One normalised log call, consumed synchronously by the sinks."""

    severity: Severity
    template: str
    args: tuple[Any, ...] = ()
    structured: bool = False
