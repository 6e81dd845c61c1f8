"""Unit tests for leveled console and JSON logging."""

import json
import logging

import pytest

from virtwrap.logging import StructuredLogger, logger


@pytest.fixture
def test_logger():
    log = StructuredLogger("test_logging.virtwrap")
    yield log
    log.logger.handlers.clear()


def make_record(level=logging.INFO, msg="Test message", exc_info=None):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


class TestStructuredLogger:
    def test_initialization(self, test_logger):
        assert test_logger.logger.name == "test_logging.virtwrap"
        assert test_logger.logger.level == logging.INFO

    def test_uses_console_formatter_by_default(self, test_logger):
        handler = test_logger.logger.handlers[0]
        assert isinstance(handler, StructuredLogger.StdStreamHandler)
        assert isinstance(handler.formatter, StructuredLogger.ConsoleFormatter)

    def test_reinitializing_does_not_duplicate_handlers(self, test_logger):
        again = StructuredLogger("test_logging.virtwrap")
        assert len(again.logger.handlers) == 1

    def test_global_logger(self):
        assert logger.logger.name == "virtwrap"


class TestStreams:
    def test_info_goes_to_stdout(self, test_logger, capsys):
        test_logger.info("Cloning base-vm")
        captured = capsys.readouterr()
        assert captured.out == "==> Cloning base-vm\n"
        assert captured.err == ""

    def test_warning_goes_to_stderr(self, test_logger, capsys):
        test_logger.warning("Overlay left on disk")
        captured = capsys.readouterr()
        assert captured.err == "⚠ Overlay left on disk\n"
        assert captured.out == ""

    def test_error_goes_to_stderr(self, test_logger, capsys):
        test_logger.error("VM 'ghost' does not exist")
        assert capsys.readouterr().err == "✗ VM 'ghost' does not exist\n"

    def test_debug_hidden_by_default(self, test_logger, capsys):
        test_logger.debug("Querying: virsh list")
        assert capsys.readouterr().out == ""

    def test_debug_shown_when_configured(self, test_logger, capsys):
        test_logger.configure("DEBUG")
        test_logger.debug("Querying: virsh list")
        assert capsys.readouterr().out == "· Querying: virsh list\n"

    def test_json_format(self, test_logger, capsys):
        test_logger.configure("INFO", "json")
        test_logger.info("Destroyed web1", vm_name="web1", removed_files=1)
        data = json.loads(capsys.readouterr().out)
        assert data["level"] == "INFO"
        assert data["message"] == "Destroyed web1"
        assert data["vm_name"] == "web1"
        assert data["removed_files"] == 1


class TestFormatters:
    def test_console_formatter_markers(self):
        formatter = StructuredLogger.ConsoleFormatter()
        assert formatter.format(make_record(logging.INFO)) == "==> Test message"
        assert formatter.format(make_record(logging.ERROR)) == "✗ Test message"

    def test_console_formatter_with_exception(self):
        try:
            raise ValueError("Test exception")
        except ValueError:
            import sys

            exc_info = sys.exc_info()
        output = StructuredLogger.ConsoleFormatter().format(make_record(logging.ERROR, exc_info=exc_info))
        assert "ValueError: Test exception" in output

    def test_json_formatter_basic_record(self):
        data = json.loads(StructuredLogger.JsonFormatter().format(make_record()))
        assert data["message"] == "Test message"
        assert data["logger"] == "test"
        assert "timestamp" in data

    def test_json_formatter_extra_fields(self):
        record = make_record()
        record.command = "virsh start web1"
        data = json.loads(StructuredLogger.JsonFormatter().format(record))
        assert data["command"] == "virsh start web1"
