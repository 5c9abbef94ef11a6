"""Unit tests for structured loggers and logging configuration."""

import asyncio
import logging
from contextlib import contextmanager

import pytest

import connected_components.core.logging_config as logging_config
from connected_components.core.identity import IdentityToken
from connected_components.core.logging_config import TaskContextFilter, configure_logging
from connected_components.core.logging_utils import (
    StructuredLogger,
    ensure_structured_logger,
    get_instance_logger,
    get_module_logger,
)


@contextmanager
def isolated_root_logging(monkeypatch):
    """Let configure_logging replace the root handlers, then put pytest's back."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(logging_config, "_configured", False)
    try:
        yield
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)


def _record(message="hello"):
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, (), None)


class TestStructuredLogger:

    def test_module_logger_namespace_and_prefix(self, caplog):
        logger = get_module_logger("Coordinator.demo")
        assert logger.name == "connected_components.Coordinator.demo"
        assert logger.component == "Coordinator.demo"

        with caplog.at_level(logging.INFO, logger="connected_components"):
            logger.info("started %s", "now")
        assert "[Coordinator.demo] started now" in caplog.text

    def test_instance_logger(self, caplog):
        logger = get_instance_logger("Actor", IdentityToken("demo", 3))
        with caplog.at_level(logging.DEBUG, logger="connected_components"):
            logger.debug("Stopped")
        assert "[Actor demo:3] Stopped" in caplog.text

    def test_bad_format_args_are_kept(self, caplog):
        logger = get_module_logger("Test")
        with caplog.at_level(logging.INFO, logger="connected_components"):
            logger.info("value %d", "not a number")
        assert "args=not a number" in caplog.text

    def test_ensure_structured_logger(self):
        plain = logging.getLogger("connected_components.Plain")
        wrapped = ensure_structured_logger(plain)
        assert isinstance(wrapped, StructuredLogger)
        assert ensure_structured_logger(wrapped) is wrapped
        assert ensure_structured_logger(None, fallback_name="Fallback").name == "connected_components.Fallback"


class TestTaskContextFilter:

    def test_outside_event_loop(self):
        record = _record()
        assert TaskContextFilter().filter(record) is True
        assert record.task == "-"

    @pytest.mark.asyncio
    async def test_inside_named_task(self):
        record = _record()

        async def emit():
            TaskContextFilter().filter(record)

        await asyncio.create_task(emit(), name="actor demo:3")
        assert record.task == "actor demo:3"


class TestConfigureLogging:

    def test_writes_rotating_log_file(self, tmp_path, monkeypatch):
        log_file = tmp_path / "logs" / "demo.log"
        with isolated_root_logging(monkeypatch):
            configure_logging("debug", console=False, log_file=log_file)
            get_module_logger("Demo").debug("written to file")

        text = log_file.read_text(encoding="utf-8")
        assert "[Demo] written to file" in text
        assert "| - " in text
        assert logging.getLogger("asyncio").level == logging.ERROR

    def test_second_call_only_changes_level(self, tmp_path, monkeypatch):
        with isolated_root_logging(monkeypatch):
            configure_logging("info", console=False, log_file=tmp_path / "a.log")
            handlers = list(logging.getLogger().handlers)

            configure_logging("warning", console=False, log_file=tmp_path / "b.log")
            assert logging.getLogger().handlers == handlers
            assert logging.getLogger().level == logging.WARNING

    def test_unknown_level(self, monkeypatch):
        with isolated_root_logging(monkeypatch), pytest.raises(ValueError):
            configure_logging("loud")
