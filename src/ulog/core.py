"""
The ULog dispatcher: one severity filter fanned out to file, console and
syslog sinks.
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Callable

from . import integrations
from .config import LoggerConfig, parse
from .diagnostics import get_logger
from .formatters import normalize
from .settings import ULogSettings
from .sinks import BaseSink, ConsoleSink, FileSink, SyslogSink
from .types import Payload, Severity, payload_from

logger = get_logger("ulog.core")

Clock = Callable[[], datetime]


def _wall_clock() -> datetime:
    return datetime.now(timezone.utc)


class ULog:
    """A logger instance.

    Construct it with a descriptor (see `ulog.config`), then call `error`,
    `warning`, `info` or `debug` with either a printf-style template and
    arguments or a mapping:

        log = ULog("console(output=stdout) file(path=/tmp/app-%Y%m%d.log)")
        log.info("started in %.2fs", 1.5)
        log.warning({"user": "alice", "attempts": 3})

    Calls are synchronous and thread-safe. Nothing in the emit path raises.

    Args:
        target: Descriptor string.
        clock: Source of the current instant, mainly for tests. Naive
            results are taken as local time.
    """

    def __init__(self, target: str = "", *, clock: Clock | None = None) -> None:
        self._lock = threading.Lock()
        self._clock = clock or _wall_clock
        self._config = LoggerConfig()
        self._sinks: tuple[BaseSink, ...] = ()
        self.reload(target)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reload(self, target: str) -> ULog:
        """Release every open resource, then install the parsed descriptor."""
        config = parse(target)
        with self._lock:
            for sink in self._sinks:
                sink.retire()
            self._config = config
            self._sinks = self._build_sinks(config)
        logger.debug(
            "logger_loaded",
            file=config.file,
            console=config.console,
            syslog=config.syslog,
            level=config.level.name.lower(),
        )
        return self

    def _build_sinks(self, config: LoggerConfig) -> tuple[BaseSink, ...]:
        sinks: list[BaseSink] = []
        if config.syslog:
            sinks.append(SyslogSink(config, self._lock))
        if config.file:
            sinks.append(FileSink(config, self._lock))
        if config.console:
            sinks.append(ConsoleSink(config, self._lock))
        return tuple(sinks)

    def close(self) -> None:
        """Close the syslog connection and file handle. Safe to repeat."""
        with self._lock:
            for sink in self._sinks:
                sink.close()

    def set_level(self, name: str) -> None:
        """Change the minimum severity; unknown names are ignored."""
        level = Severity.from_name(name)
        if level is None:
            return
        with self._lock:
            self._config = self._config.model_copy(update={"level": level})

    @property
    def config(self) -> LoggerConfig:
        return self._config

    @property
    def level(self) -> Severity:
        return self._config.level

    @property
    def sinks(self) -> tuple[BaseSink, ...]:
        return self._sinks

    def __enter__(self) -> ULog:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _now(self) -> datetime:
        now = self._clock()
        if self._config.utc:
            return now.astimezone(timezone.utc)
        return now.astimezone()

    def enabled_for(self, severity: Severity) -> bool:
        config = self._config
        return severity <= config.level and config.enabled

    def emit(self, severity: Severity, payload: Payload) -> None:
        """Dispatch one event to every enabled sink."""
        if not self.enabled_for(severity):
            return
        sinks = self._sinks
        event = normalize(severity, payload)
        now = self._now()
        for sink in sinks:
            try:
                sink.emit(event, now)
            except Exception as exc:
                logger.debug("sink_emit_failed", sink=type(sink).__name__, error=str(exc))

    def error(self, layout: Any, *args: Any) -> None:
        if self.enabled_for(Severity.ERROR):
            self.emit(Severity.ERROR, payload_from(layout, args))

    def warning(self, layout: Any, *args: Any) -> None:
        if self.enabled_for(Severity.WARNING):
            self.emit(Severity.WARNING, payload_from(layout, args))

    def info(self, layout: Any, *args: Any) -> None:
        if self.enabled_for(Severity.INFO):
            self.emit(Severity.INFO, payload_from(layout, args))

    def debug(self, layout: Any, *args: Any) -> None:
        if self.enabled_for(Severity.DEBUG):
            self.emit(Severity.DEBUG, payload_from(layout, args))


# =============================================================================
# Process-wide default instance
# =============================================================================

_default: ULog | None = None
_default_lock = threading.Lock()


def get_default() -> ULog | None:
    """The instance installed by `configure_logging`, if any."""
    return _default


def set_default(log: ULog | None) -> ULog | None:
    """Install `log` as the process default, closing the previous one."""
    global _default
    with _default_lock:
        previous, _default = _default, log
    if previous is not None and previous is not log:
        previous.close()
    return log


def shutdown_logging() -> None:
    """Close and forget the process default instance."""
    set_default(None)


def configure_logging(
    target: str | None = None,
    *,
    level: str | None = None,
    intercept_stdlib: bool = True,
    configure_structlog: bool = True,
) -> ULog:
    """
    Build the process default logger and route other logging APIs into it.

    Args:
        target: Descriptor; defaults to ULOG_TARGET (or "console()").
        level: Severity name overriding the descriptor's option(level=...);
            defaults to ULOG_LEVEL when set.
        intercept_stdlib: Attach a ULogHandler to the root stdlib logger.
        configure_structlog: Make structlog's global loggers emit through it.
    """
    if target is None or level is None:
        settings = ULogSettings()
        target = settings.target if target is None else target
        level = settings.level if level is None else level

    log = ULog(target)
    if level:
        log.set_level(level)
    set_default(log)

    if configure_structlog:
        integrations.configure_structlog(log)
    if intercept_stdlib:
        integrations.intercept_stdlib(log)
    return log
