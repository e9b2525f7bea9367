"""
configure_logging(): structlog and stdlib logging routed into the default logger.
"""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from ulog import ULogHandler, configure_logging, get_default, shutdown_logging
from ulog.diagnostics import get_logger as get_diagnostics_logger
from ulog.settings import ULogSettings

PLAIN_STDOUT = "console(output=stdout, time=0, colors=0)"


class TestStructlogBridge:
    """structlog events become structured payloads"""

    def test_event_dict_is_serialised(self, capsys) -> None:
        configure_logging(PLAIN_STDOUT, intercept_stdlib=False)
        structlog.get_logger().warning("user_login", user="alice", attempt=2)

        out = capsys.readouterr().out
        assert out.startswith("WARN ")
        payload = json.loads(out[len("WARN "):])
        assert payload == {"event": "user_login", "user": "alice", "attempt": 2, "level": "warning"}

    def test_filtered_by_ulog_level(self, capsys) -> None:
        configure_logging(PLAIN_STDOUT, level="error", intercept_stdlib=False)
        structlog.get_logger().info("quiet")
        structlog.get_logger().error("loud")
        out = capsys.readouterr().out
        assert "quiet" not in out
        assert '"event":"loud"' in out

    def test_exceptions_are_rendered(self, capsys) -> None:
        configure_logging(PLAIN_STDOUT, intercept_stdlib=False)
        try:
            raise ValueError("bad input")
        except ValueError:
            structlog.get_logger().exception("failed")

        payload = json.loads(capsys.readouterr().out[len("ERRO "):])
        assert payload["event"] == "failed"
        assert "ValueError: bad input" in payload["exception"]


class TestStdlibBridge:
    """stdlib logging records become template payloads"""

    def test_records_reach_the_console(self, capsys) -> None:
        configure_logging(PLAIN_STDOUT, configure_structlog=False)
        logging.getLogger("app.worker").warning("disk %s", "full")
        logging.getLogger("app.worker").info("started")
        assert capsys.readouterr().out == "WARN disk full\nINFO started\n"

    def test_set_level_applies_to_stdlib_records(self, capsys) -> None:
        log = configure_logging(PLAIN_STDOUT, configure_structlog=False)
        logging.getLogger("app").debug("hidden")
        log.set_level("debug")
        logging.getLogger("app").debug("shown")
        assert capsys.readouterr().out == "DBUG shown\n"

    def test_formatted_percent_is_not_reinterpreted(self, capsys) -> None:
        configure_logging(PLAIN_STDOUT, configure_structlog=False)
        logging.getLogger("app").warning("%d%%%% off", 50)
        assert capsys.readouterr().out == "WARN 50%% off\n"

    def test_ulog_diagnostics_are_not_looped_back(self, capsys) -> None:
        configure_logging(f"{PLAIN_STDOUT} option(level=debug)", configure_structlog=False)
        get_diagnostics_logger("sinks").warning("file_open_failed", path="/nope")
        assert capsys.readouterr().out == ""

    def test_reconfigure_replaces_handler(self) -> None:
        configure_logging(PLAIN_STDOUT, configure_structlog=False)
        configure_logging(PLAIN_STDOUT, configure_structlog=False)
        ours = [h for h in logging.getLogger().handlers if isinstance(h, ULogHandler)]
        assert len(ours) == 1


class TestDefaultInstance:
    """Process-wide default and environment settings"""

    def test_settings_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ULOG_TARGET", "file(path=/tmp/x.log)")
        monkeypatch.setenv("ULOG_LEVEL", "debug")
        settings = ULogSettings()
        assert settings.target == "file(path=/tmp/x.log)"
        assert settings.level == "debug"

    def test_settings_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ULOG_TARGET", raising=False)
        monkeypatch.delenv("ULOG_LEVEL", raising=False)
        settings = ULogSettings(_env_file=None)
        assert settings.target == "console()"
        assert settings.level is None

    def test_configure_from_environment(self, capsys, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ULOG_TARGET", PLAIN_STDOUT)
        monkeypatch.setenv("ULOG_LEVEL", "debug")
        log = configure_logging(intercept_stdlib=False, configure_structlog=False)
        assert get_default() is log
        log.debug("from env")
        assert capsys.readouterr().out == "DBUG from env\n"

    def test_shutdown_forgets_default(self) -> None:
        configure_logging(PLAIN_STDOUT, intercept_stdlib=False, configure_structlog=False)
        shutdown_logging()
        assert get_default() is None

    def test_replacing_default_closes_previous(self, tmp_path) -> None:
        first = configure_logging(f"file(path={tmp_path}/a.log)", intercept_stdlib=False, configure_structlog=False)
        first.info("opened")
        (sink,) = first.sinks
        assert sink.handle is not None
        configure_logging(PLAIN_STDOUT, intercept_stdlib=False, configure_structlog=False)
        assert sink.handle is None
