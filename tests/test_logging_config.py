"""Tests for logging configuration and formatters."""

import json
import logging
import sys

import pytest

from tracker.logging import ComponentLoggerAdapter, get_logger
from tracker.logging.config import (
    SERVICE_NAME,
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from tracker.logging.context import log_context

KEY_VALUE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def make_record(message="Test message", level=logging.INFO, extra=None):
    return logging.getLogger("test").makeRecord(
        "tracker.test", level, "test.py", 1, message, (), None, extra=extra
    )


class TestJSONFormatter:
    def test_mandatory_fields(self):
        log_obj = json.loads(JSONFormatter().format(make_record()))

        assert log_obj["level"] == "INFO"
        assert log_obj["message"] == "Test message"
        # YYYY-MM-DDTHH:MM:SS.sssZ
        assert log_obj["timestamp"].endswith("Z")
        assert len(log_obj["timestamp"]) == 24
        assert "name" not in log_obj

    def test_extra_fields(self):
        record = make_record(
            extra={
                "event": "extraction.page.scraped",
                "listings": 25,
                "is_partial": False,
                "stop_detail": None,
                "pages": [1, 2],
                "reason": object(),
            }
        )

        log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["event"] == "extraction.page.scraped"
        assert log_obj["listings"] == 25
        assert log_obj["is_partial"] is False
        assert log_obj["stop_detail"] is None
        assert log_obj["pages"] == [1, 2]
        assert isinstance(log_obj["reason"], str)

    def test_exception_info(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.getLogger("test").makeRecord(
                "tracker.test", logging.ERROR, "test.py", 1, "Failed", (), sys.exc_info()
            )

        log_obj = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in log_obj["exc_info"]


class TestKeyValueFormatter:
    def test_basic(self):
        output = KeyValueFormatter(KEY_VALUE_FORMAT).format(make_record())

        assert "[INFO] tracker.test: Test message" in output

    def test_extras_sorted_and_rendered(self):
        record = make_record(
            extra={
                "stop_reason": "end_of_results",
                "stop_detail": "No next-page control",
                "is_partial": False,
                "page": 2,
                "missing": None,
            }
        )

        output = KeyValueFormatter(KEY_VALUE_FORMAT).format(record)

        assert (
            'is_partial=false missing=null page=2 stop_detail="No next-page control" '
            "stop_reason=end_of_results"
        ) in output

    def test_static_fields_not_repeated(self):
        record = make_record()
        ContextualFilter(environment="test").filter(record)

        output = KeyValueFormatter(KEY_VALUE_FORMAT).format(record)

        assert "service=" not in output
        assert "environment=" not in output


class TestContextualFilter:
    def test_static_fields(self):
        record = make_record()

        assert ContextualFilter(environment="production").filter(record) is True
        assert record.service == SERVICE_NAME
        assert record.environment == "production"

    def test_context_fields(self):
        with log_context(run_id="run-1", actor_id="user-1", page=2):
            record = make_record()
            ContextualFilter().filter(record)

        assert record.run_id == "run-1"
        assert record.actor_id == "user-1"
        assert record.page == 2

    def test_explicit_extra_wins_over_context(self):
        with log_context(page=2):
            record = make_record(extra={"page": 3})
            ContextualFilter().filter(record)

        assert record.page == 3

    def test_full_pipeline_json(self):
        with log_context(run_id="run-1"):
            record = make_record("Run completed", extra={"event": "pipeline.run.completed"})
            ContextualFilter(environment="test").filter(record)
            log_obj = json.loads(JSONFormatter().format(record))

        assert log_obj["service"] == SERVICE_NAME
        assert log_obj["environment"] == "test"
        assert log_obj["run_id"] == "run-1"
        assert log_obj["event"] == "pipeline.run.completed"


class TestGetLogger:
    def test_plain_logger(self):
        assert isinstance(get_logger("tracker.test"), logging.Logger)

    def test_component_adapter_merges_extra(self, caplog):
        logger = get_logger("tracker.test.adapter", component="extraction")
        assert isinstance(logger, ComponentLoggerAdapter)

        with caplog.at_level(logging.INFO, logger="tracker.test.adapter"):
            logger.info("Page scraped", extra={"event": "extraction.page.scraped"})

        record = caplog.records[-1]
        assert record.component == "extraction"
        assert record.event == "extraction.page.scraped"


class TestConfigureLogging:
    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID")

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid log format"):
            configure_logging(format_type="xml")

    @pytest.mark.parametrize(
        "format_type,formatter_class",
        [("json", JSONFormatter), ("key-value", KeyValueFormatter)],
    )
    def test_installs_single_handler(self, restore_root_logger, format_type, formatter_class):
        configure_logging(level="DEBUG", format_type=format_type, environment="test")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, formatter_class)
        assert any(isinstance(f, ContextualFilter) for f in root.handlers[0].filters)

    def test_quiets_werkzeug(self, restore_root_logger):
        configure_logging(level="DEBUG")

        assert logging.getLogger("werkzeug").level == logging.WARNING
