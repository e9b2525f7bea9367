"""
strftime-style time formatting with a fixed, locale-independent verb table.

Used to resolve rotating file paths (`/var/log/app-%Y%m%d.log`) and the
timestamp prefixes of the file and console sinks.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Callable

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


# =============================================================================
# Field helpers
# =============================================================================


def _hour12(base: datetime) -> int:
    return base.hour % 12 or 12


def _sunday_weekday(base: datetime) -> int:
    """Weekday with Sunday as 0."""
    return (base.weekday() + 1) % 7


def _yday(base: datetime) -> int:
    return base.timetuple().tm_yday


def _epoch(base: datetime) -> int:
    return math.floor(base.timestamp())


def _offset(base: datetime) -> str:
    delta = base.utcoffset() or timedelta(0)
    minutes = int(delta.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def _zone(base: datetime) -> str:
    return base.tzname() or _offset(base)


def _ctime(base: datetime) -> str:
    return (
        f"{WEEKDAYS[base.weekday()][:3]} {MONTHS[base.month - 1][:3]} {base.day} "
        f"{base.hour:02d}:{base.minute:02d}:{base.second:02d} {base.year}"
    )


def _short_date(base: datetime) -> str:
    return f"{base.month:02d}/{base.day:02d}/{base.year % 100:02d}"


def _clock(base: datetime) -> str:
    return f"{base.hour:02d}:{base.minute:02d}:{base.second:02d}"


_VERBS: dict[str, Callable[[datetime], str]] = {
    "a": lambda b: WEEKDAYS[b.weekday()][:3],
    "A": lambda b: WEEKDAYS[b.weekday()],
    "b": lambda b: MONTHS[b.month - 1][:3],
    "B": lambda b: MONTHS[b.month - 1],
    "c": _ctime,
    "C": lambda b: f"{b.year // 100:02d}",
    "d": lambda b: f"{b.day:02d}",
    "D": _short_date,
    "e": lambda b: f"{b.day:2d}",
    "f": lambda b: f"{b.microsecond:06d}",
    "F": lambda b: f"{b.year:04d}-{b.month:02d}-{b.day:02d}",
    "g": lambda b: f"{b.isocalendar()[0] % 100:02d}",
    "G": lambda b: f"{b.isocalendar()[0]:04d}",
    "h": lambda b: MONTHS[b.month - 1][:3],
    "H": lambda b: f"{b.hour:02d}",
    "I": lambda b: f"{_hour12(b):02d}",
    "j": lambda b: f"{_yday(b):03d}",
    "k": lambda b: f"{b.hour:2d}",
    "l": lambda b: f"{_hour12(b):2d}",
    "m": lambda b: f"{b.month:02d}",
    "M": lambda b: f"{b.minute:02d}",
    "n": lambda b: "\n",
    "p": lambda b: "AM" if b.hour < 12 else "PM",
    "P": lambda b: "am" if b.hour < 12 else "pm",
    "r": lambda b: f"{_hour12(b):02d}:{b.minute:02d}:{b.second:02d} {'AM' if b.hour < 12 else 'PM'}",
    "R": lambda b: f"{b.hour:02d}:{b.minute:02d}",
    "s": lambda b: str(_epoch(b)),
    "S": lambda b: f"{b.second:02d}",
    "t": lambda b: "\t",
    "T": _clock,
    "u": lambda b: str(b.isoweekday()),
    "U": lambda b: str((_yday(b) + 6 - _sunday_weekday(b)) // 7),
    "V": lambda b: f"{b.isocalendar()[1]:02d}",
    "w": lambda b: str(_sunday_weekday(b)),
    "W": lambda b: str((_yday(b) + 6 - b.weekday()) // 7),
    "x": _short_date,
    "X": _clock,
    "y": lambda b: f"{b.year % 100:02d}",
    "Y": lambda b: f"{b.year:04d}",
    "z": _offset,
    "Z": _zone,
    "%": lambda b: "%",
}


def strftime(layout: str, base: datetime) -> str:
    """Render `layout` for the instant `base`.

    Unknown verbs are dropped together with their `%`, as is a trailing
    lone `%`. Characters outside verbs are copied unchanged.
    """
    if "%" not in layout:
        return layout

    output: list[str] = []
    index = 0
    length = len(layout)
    while index < length:
        char = layout[index]
        if char != "%":
            output.append(char)
            index += 1
            continue
        if index < length - 1:
            verb = _VERBS.get(layout[index + 1])
            if verb is not None:
                output.append(verb(base))
        index += 2
    return "".join(output)
