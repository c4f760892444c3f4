"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from finwatch.config import BaseConfig
from finwatch.logging_config import JSONFormatter, get_logger, setup_logging


@pytest.fixture
def config(monkeypatch, tmp_path):
    monkeypatch.setenv("FINWATCH_DATA_DIR", str(tmp_path))
    return BaseConfig()


@pytest.fixture(autouse=True)
def reset_finwatch_logger():
    yield
    logger = logging.getLogger("finwatch")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def _record(msg: str = "Test message", level: int = logging.INFO, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="finwatch.test",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    return record


def test_json_formatter():
    """JSONFormatter emits the standard fields as a JSON object."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "finwatch.test"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_exception():
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record("Error occurred", logging.ERROR, exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_json_formatter_includes_extra_fields():
    record = _record()
    record.notification_id = "budget:2025-01-15:1:warning"

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"notification_id": "budget:2025-01-15:1:warning"}


def test_setup_logging(config, tmp_path):
    """Setup attaches console + rotating JSON file handlers."""
    logger = setup_logging(config)

    assert logger.name == "finwatch"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2

    log_file = tmp_path / "logs" / "finwatch.log"
    assert log_file.exists()

    get_logger("monitoring").warning("Low balance", extra={"account_id": 3})
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    entries = [json.loads(line) for line in lines]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "finwatch.monitoring"
    assert entries[-1]["extra"] == {"account_id": 3}


def test_setup_logging_is_idempotent(config):
    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger():
    logger1 = get_logger("module1")
    logger2 = get_logger("module2")

    assert logger1.name == "finwatch.module1"
    assert logger2.name == "finwatch.module2"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(config, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        handler
        for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler)
        and not isinstance(handler, logging.handlers.RotatingFileHandler)
    )
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level
