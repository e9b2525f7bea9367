import logging
import re
from datetime import datetime, timedelta, timezone

import pytest
import structlog

from ulog import shutdown_logging

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


class FakeClock:
    """Deterministic replacement for the wall clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """A clock frozen at 2024-03-05 08:00:00 UTC."""
    return FakeClock(datetime(2024, 3, 5, 8, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def strip_ansi():
    return lambda text: ANSI_RE.sub("", text)


@pytest.fixture(autouse=True)
def reset_global_logging():
    """Undo configure_logging() side effects between tests."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    shutdown_logging()
    structlog.reset_defaults()
    root_logger.handlers = handlers
    root_logger.setLevel(level)
