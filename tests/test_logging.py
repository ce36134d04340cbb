"""Tests for logging setup."""

import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from planning_relay.config import LoggingConfig
from planning_relay.logging import ColoredFormatter, StructuredFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_structured_formatter_includes_extra():
    """Test that the structured formatter includes extra fields."""
    record = logging.LogRecord(
        "planning_relay.dispatcher", logging.INFO, __file__, 10,
        "Planning sent to %s", ("alice@example.com",), None,
    )
    record.batch_size = 3

    data = json.loads(StructuredFormatter().format(record))

    assert data["message"] == "Planning sent to alice@example.com"
    assert data["level"] == "INFO"
    assert data["batch_size"] == 3


def test_setup_logging_writes_json_file(tmp_path, restore_root_logger):
    """Test writing JSON lines to the log file."""
    log_file = tmp_path / "logs" / "relay.log"
    setup_logging(LoggingConfig(level="DEBUG", file_path=str(log_file), console_output=False))

    logging.getLogger("planning_relay.test").info("hello")
    for handler in restore_root_logger.handlers:
        handler.flush()

    line = log_file.read_text().splitlines()[-1]
    assert json.loads(line)["message"] == "hello"
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("aiosmtplib").level == logging.WARNING


def test_setup_logging_rejects_unknown_level(restore_root_logger):
    """Test rejecting an unknown log level."""
    with pytest.raises(ValueError):
        setup_logging(LoggingConfig(level="LOUD"))


@pytest.mark.parametrize("is_tty,formatter_class", [(True, ColoredFormatter), (False, logging.Formatter)])
def test_console_colour_follows_stdout(monkeypatch, restore_root_logger, is_tty, formatter_class):
    """Test that colours depend on whether stdout, the console stream, is a terminal."""
    stdout = MagicMock()
    stdout.isatty.return_value = is_tty
    stderr = MagicMock()
    stderr.isatty.return_value = not is_tty
    monkeypatch.setattr(sys, "stdout", stdout)
    monkeypatch.setattr(sys, "stderr", stderr)

    setup_logging(LoggingConfig(console_output=True))

    handler = restore_root_logger.handlers[0]
    assert handler.stream is stdout
    assert type(handler.formatter) is formatter_class
