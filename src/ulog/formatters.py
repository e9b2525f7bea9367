"""
Payload normalisation and per-sink line formatting.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

import orjson

from .timefmt import strftime
from .types import LogEvent, Payload, Severity, StructuredPayload, TimeMode

# =============================================================================
# ANSI Colors (console sink)
# =============================================================================

RESET = "\x1b[0m"
KEY_COLOR = "\x1b[37m"

SEVERITY_COLORS = {
    Severity.ERROR: "\x1b[31m",
    Severity.WARNING: "\x1b[33m",
    Severity.INFO: "\x1b[36m",
    Severity.DEBUG: "\x1b[32m",
}

_KEY_RE = re.compile(r'"([^"]+)"\s*:')

_TIME_LAYOUTS = {
    TimeMode.DATE: "%F %T ",
    TimeMode.TIMESTAMP: "%s ",
}


# =============================================================================
# JSON Serialization
# =============================================================================


def orjson_dumps(v: Any) -> str:
    """Compact single-line JSON with sorted keys, no HTML escaping."""
    return orjson.dumps(v, default=str, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_SORT_KEYS).decode()


def normalize(severity: Severity, payload: Payload) -> LogEvent:
    """Turn a payload into a `LogEvent` with a trimmed template."""
    if isinstance(payload, StructuredPayload):
        try:
            serialized = orjson_dumps(dict(payload.mapping))
        except orjson.JSONEncodeError:
            serialized = str(payload.mapping)
        return LogEvent(severity, "%s", (serialized,), structured=True)
    return LogEvent(severity, payload.template.strip(), tuple(payload.args))


def render_message(template: str, args: tuple[Any, ...]) -> str:
    """printf-style substitution; mismatched templates never raise."""
    try:
        return template % args
    except (TypeError, ValueError, KeyError):
        return " ".join([template, *(str(arg) for arg in args)])


# =============================================================================
# Prefixes
# =============================================================================


def time_prefix(mode: TimeMode, now: datetime) -> str:
    layout = _TIME_LAYOUTS.get(mode)
    if layout is None:
        return ""
    return strftime(layout, now)


def colorize_label(severity: Severity) -> str:
    return f"{SEVERITY_COLORS[severity]}{severity.label}{RESET}"


def highlight_keys(text: str) -> str:
    """Wrap every `"key":` token of serialised JSON in the key color."""
    return _KEY_RE.sub(lambda m: f'"{KEY_COLOR}{m.group(1)}{RESET}":', text)


def format_file_line(event: LogEvent, now: datetime, *, time_mode: TimeMode, severity: bool) -> str:
    prefix = time_prefix(time_mode, now)
    if severity:
        prefix += event.severity.label
    return prefix + render_message(event.template, event.args) + "\n"


def format_console_line(
    event: LogEvent,
    now: datetime,
    *,
    time_mode: TimeMode,
    severity: bool,
    colors: bool,
) -> str:
    prefix = time_prefix(time_mode, now)
    if severity:
        prefix += colorize_label(event.severity) if colors else event.severity.label
    args = event.args
    if event.structured and colors:
        args = tuple(highlight_keys(str(arg)) for arg in args)
    return prefix + render_message(event.template, args) + "\n"