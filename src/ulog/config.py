"""
Logger configuration and the descriptor mini-language.

A descriptor is a free-form string of directives:

    file(path=/var/log/app-%Y%m%d.log, time=stamp) console(output=stdout, colors=0)
    syslog(remote=10.0.0.1, name=app, facility=local3) option(utc=1, level=debug)

Directives are located by pattern, so anything else in the string is
ignored. Parsing never fails: an empty or unrecognised descriptor yields a
config with every sink disabled.
"""

from __future__ import annotations

import os
import re
import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .types import ConsoleTarget, Facility, Severity, TimeMode

DEFAULT_SYSLOG_PORT = 514

_DIRECTIVE_RE = re.compile(r"(file|console|syslog|option)\s*\(([^)]*)\)")
_OPTION_RE = re.compile(r"([^:=,\s]+)\s*[:=]\s*([^,\s]+)")
_PORT_RE = re.compile(r":\d+$")
_TRUTHY = frozenset({"1", "true", "on", "yes"})


def default_program_name() -> str:
    """Basename of the running program, used as the default syslog tag."""
    if sys.argv and sys.argv[0]:
        return os.path.basename(sys.argv[0]) or "python"
    return "python"


class LoggerConfig(BaseModel):
    """Immutable sink configuration produced by `parse`."""

    model_config = ConfigDict(frozen=True)

    file: bool = False
    file_path: str = ""
    file_time: TimeMode = TimeMode.DATE
    file_severity: bool = True

    console: bool = False
    console_output: ConsoleTarget = "stderr"
    console_time: TimeMode = TimeMode.DATE
    console_severity: bool = True
    console_colors: bool = True

    syslog: bool = False
    syslog_remote: str = ""
    syslog_name: str = Field(default_factory=default_program_name)
    syslog_facility: Facility = Facility.USER

    utc: bool = False
    level: Severity = Severity.INFO

    @model_validator(mode="before")
    @classmethod
    def _file_requires_path(cls, data: Any) -> Any:
        """The file sink is only enabled together with a path."""
        if isinstance(data, dict) and data.get("file") and not data.get("file_path"):
            data = {**data, "file": False}
        return data

    @property
    def enabled(self) -> bool:
        """True when at least one sink will receive events."""
        return self.file or self.console or self.syslog


# =============================================================================
# Parsing
# =============================================================================


def _truthy(value: str) -> bool:
    return value.lower() in _TRUTHY


def _time_mode(value: str) -> TimeMode:
    value = value.lower()
    if value in ("stamp", "timestamp"):
        return TimeMode.TIMESTAMP
    if value in _TRUTHY:
        return TimeMode.DATE
    return TimeMode.NONE


def _options(body: str) -> list[tuple[str, str]]:
    return [(key.lower(), value) for key, value in _OPTION_RE.findall(body)]


def _parse_file(body: str, fields: dict[str, Any]) -> None:
    fields["file"] = True
    for key, value in _options(body):
        if key == "path":
            fields["file_path"] = value
        elif key == "time":
            fields["file_time"] = _time_mode(value)
        elif key == "severity":
            fields["file_severity"] = _truthy(value)


def _parse_console(body: str, fields: dict[str, Any]) -> None:
    fields["console"] = True
    for key, value in _options(body):
        value = value.lower()
        if key == "output":
            fields["console_output"] = "stdout" if value == "stdout" else "stderr"
        elif key == "time":
            fields["console_time"] = _time_mode(value)
        elif key == "severity":
            fields["console_severity"] = _truthy(value)
        elif key == "colors":
            fields["console_colors"] = _truthy(value)


def _parse_syslog(body: str, fields: dict[str, Any]) -> None:
    fields["syslog"] = True
    for key, value in _options(body):
        if key == "remote":
            if not _PORT_RE.search(value):
                value = f"{value}:{DEFAULT_SYSLOG_PORT}"
            fields["syslog_remote"] = value
        elif key == "name":
            fields["syslog_name"] = value
        elif key == "facility":
            fields["syslog_facility"] = Facility.from_name(value) or Facility.USER


def _parse_option(body: str, fields: dict[str, Any]) -> None:
    for key, value in _options(body):
        if key == "utc":
            fields["utc"] = _truthy(value)
        elif key == "level":
            # Unknown names fall to the most urgent floor.
            fields["level"] = Severity.from_name(value) or Severity.ERROR


_PARSERS = {
    "file": _parse_file,
    "console": _parse_console,
    "syslog": _parse_syslog,
    "option": _parse_option,
}


def parse(descriptor: str) -> LoggerConfig:
    """Parse a descriptor string into a `LoggerConfig`. Never raises."""
    fields: dict[str, Any] = {}
    for name, body in _DIRECTIVE_RE.findall(descriptor or ""):
        _PARSERS[name](body, fields)
    return LoggerConfig(**fields)
