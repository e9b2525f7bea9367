"""
Log sink abstractions and concrete implementations.

Every sink of one logger shares the logger's lock. Handles are opened
lazily on the first event that needs them and are only touched while that
lock is held. Failures are reported through diagnostics and leave the
handle unset, so the next event retries.
"""

from __future__ import annotations

import logging
import os
import socket
import sys
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from logging.handlers import SysLogHandler
from pathlib import Path
from typing import TextIO

from .config import LoggerConfig
from .diagnostics import get_logger
from .formatters import format_console_line, format_file_line, render_message
from .timefmt import strftime
from .types import STDLIB_LEVELS, LogEvent

logger = get_logger("ulog.sinks")

EPOCH = datetime.fromtimestamp(0, timezone.utc)
ROTATION_CHECK_INTERVAL = timedelta(seconds=1)
CLOCK_STEP_BACK = timedelta(minutes=1)
LOCAL_SYSLOG_SOCKETS = ("/dev/log", "/var/run/syslog", "/var/run/log")


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    def __init__(self, config: LoggerConfig, lock: threading.Lock) -> None:
        self._config = config
        self._lock = lock
        self._retired = False

    @abstractmethod
    def emit(self, event: LogEvent, now: datetime) -> None:
        """Deliver one event. Must not raise."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release open handles. Must be called with the shared lock held."""
        ...

    def retire(self) -> None:
        """Close for good; a retired sink never reopens its resources.

        Must be called with the shared lock held.
        """
        self._retired = True
        self.close()


class FileSink(BaseSink):
    """Append-only file sink whose path is re-resolved from a time template."""

    def __init__(self, config: LoggerConfig, lock: threading.Lock) -> None:
        super().__init__(config, lock)
        self._template = config.file_path
        self._handle: TextIO | None = None
        self._path = ""
        self._last_check = EPOCH

    @property
    def path(self) -> str:
        """The most recently resolved path ("" before the first event)."""
        return self._path

    @property
    def handle(self) -> TextIO | None:
        return self._handle

    def emit(self, event: LogEvent, now: datetime) -> None:
        self._rotate(now)
        line = format_file_line(
            event,
            now,
            time_mode=self._config.file_time,
            severity=self._config.file_severity,
        )
        with self._lock:
            if self._handle is None:
                return
            try:
                self._handle.write(line)
                self._handle.flush()
            except (OSError, ValueError) as exc:
                logger.debug("file_write_failed", path=self._path, error=str(exc))
                self._close_handle()

    def _rotate(self, now: datetime) -> None:
        with self._lock:
            if self._retired:
                return
            # Out-of-order stamps from concurrent callers are not a clock step.
            elapsed = now - self._last_check
            if self._handle is not None and -CLOCK_STEP_BACK < elapsed < ROTATION_CHECK_INTERVAL:
                return
            self._last_check = now
            path = strftime(self._template, now)
            if path != self._path:
                self._close_handle()
                self._path = path
            if self._handle is None:
                self._handle = self._open(path)

    def _open(self, path: str) -> TextIO | None:
        try:
            _make_dirs(Path(path).parent)
            fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_APPEND, 0o644)
            return os.fdopen(fd, "a", encoding="utf-8")
        except OSError as exc:
            logger.debug("file_open_failed", path=path, error=str(exc))
            return None

    def _close_handle(self) -> None:
        if self._handle is None:
            return
        try:
            self._handle.close()
        except OSError as exc:
            logger.debug("file_close_failed", path=self._path, error=str(exc))
        self._handle = None

    def close(self) -> None:
        self._close_handle()


def _make_dirs(directory: Path) -> None:
    """Create `directory` and any missing parents, each with mode 0755."""
    missing = []
    for parent in (directory, *directory.parents):
        if parent.exists():
            break
        missing.append(parent)
    for parent in reversed(missing):
        parent.mkdir(mode=0o755, exist_ok=True)


class ConsoleSink(BaseSink):
    """Standard output / standard error sink with optional ANSI colors."""

    def emit(self, event: LogEvent, now: datetime) -> None:
        line = format_console_line(
            event,
            now,
            time_mode=self._config.console_time,
            severity=self._config.console_severity,
            colors=self._config.console_colors,
        )
        with self._lock:
            stream = sys.stdout if self._config.console_output == "stdout" else sys.stderr
            try:
                stream.write(line)
                stream.flush()
            except (OSError, ValueError) as exc:
                logger.debug("console_write_failed", output=self._config.console_output, error=str(exc))

    def close(self) -> None:
        pass


class _SyslogHandler(SysLogHandler):
    """SysLogHandler that flags send failures instead of printing them."""

    failed = False

    def handleError(self, record: logging.LogRecord) -> None:
        self.failed = True


class SyslogSink(BaseSink):
    """Local or remote (UDP) syslog sink."""

    def __init__(self, config: LoggerConfig, lock: threading.Lock) -> None:
        super().__init__(config, lock)
        self._connection: _SyslogHandler | None = None

    @property
    def connection(self) -> SysLogHandler | None:
        return self._connection

    def emit(self, event: LogEvent, now: datetime) -> None:
        connection = self._connection
        if connection is None:
            with self._lock:
                if self._connection is None and not self._retired:
                    self._connection = self._dial()
                connection = self._connection
            if connection is None:
                return

        levelno = STDLIB_LEVELS[event.severity]
        record = logging.makeLogRecord(
            {
                "name": "ulog.syslog",
                "msg": render_message(event.template, event.args),
                "levelno": levelno,
                "levelname": logging.getLevelName(levelno),
            }
        )
        connection.handle(record)
        if connection.failed:
            logger.debug("syslog_send_failed", remote=self._config.syslog_remote or "local")
            with self._lock:
                if self._connection is connection:
                    self._close_connection()

    def _dial(self) -> _SyslogHandler | None:
        remote = self._config.syslog_remote
        facility = int(self._config.syslog_facility)
        try:
            if remote:
                host, _, port = remote.rpartition(":")
                connection = _SyslogHandler(
                    address=(host, int(port)),
                    facility=facility,
                    socktype=socket.SOCK_DGRAM,
                )
                connection.append_nul = False
            else:
                connection = self._dial_local(facility)
        except (OSError, ValueError) as exc:
            logger.debug("syslog_dial_failed", remote=remote or "local", error=str(exc))
            return None
        connection.ident = f"{self._config.syslog_name}[{os.getpid()}]: "
        return connection

    @staticmethod
    def _dial_local(facility: int) -> _SyslogHandler:
        for address in LOCAL_SYSLOG_SOCKETS:
            if not os.path.exists(address):
                continue
            connection = _SyslogHandler(address=address, facility=facility)
            sock = getattr(connection, "socket", None)
            if sock is not None and sock.fileno() != -1:
                return connection
            connection.close()
        raise OSError("no local syslog socket available")

    def _close_connection(self) -> None:
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None

    def close(self) -> None:
        self._close_connection()
