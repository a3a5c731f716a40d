"""Unit tests for structured logging."""

import json
import logging
import sys
from io import StringIO

import pytest

from feed_relay.logging_config import (
    StructuredFormatter,
    create_execution_logger,
    new_execution_id,
    setup_structured_logging,
)


class TestStructuredFormatter:
    """Unit tests for StructuredFormatter."""

    def test_context_fields_are_emitted(self):
        record = logging.LogRecord(
            "feed_relay.relay", logging.ERROR, __file__, 10, "Tick aborted", None, None
        )
        record.execution_id = "tick_1"
        record.component = "relay"
        record.feed_url = "https://feed.example/rss"
        record.channel_id = "42"
        record.error_kind = "fetch_error"

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "ERROR"
        assert entry["message"] == "Tick aborted"
        assert entry["execution_id"] == "tick_1"
        assert entry["feed_url"] == "https://feed.example/rss"
        assert entry["channel_id"] == "42"
        assert entry["error_kind"] == "fetch_error"

    def test_arbitrary_extra_fields_are_emitted(self):
        record = logging.LogRecord(
            "feed_relay.scheduler", logging.WARNING, __file__, 5, "overran", None, None
        )
        record.overrun_seconds = 2.5
        record.attempt = 3

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["overrun_seconds"] == 2.5
        assert entry["attempt"] == 3

    def test_standard_record_attributes_are_not_duplicated(self):
        record = logging.LogRecord(
            "feed_relay", logging.INFO, __file__, 1, "hello %s", ("world",), None
        )

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "hello world"
        for name in ("args", "msg", "levelno", "pathname", "created", "thread"):
            assert name not in entry

    def test_exception_is_included(self):
        try:
            raise ValueError("bad")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            "feed_relay", logging.ERROR, __file__, 1, "failed", None, exc_info
        )

        entry = json.loads(StructuredFormatter().format(record))

        assert "ValueError: bad" in entry["exception"]


class TestExecutionLogger:
    """Unit tests for ExecutionLogger."""

    def test_records_carry_execution_context(self, caplog):
        logger = create_execution_logger("relay", "tick_test")

        with caplog.at_level(logging.INFO, logger="feed_relay"):
            logger.info("Posted news", item_link="https://x/2")

        record = caplog.records[-1]
        assert record.name == "feed_relay.relay"
        assert record.execution_id == "tick_test"
        assert record.component == "relay"
        assert record.item_link == "https://x/2"

    def test_execution_end_emits_duration_and_success(self):
        logger = create_execution_logger("relay", "tick_test")
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        logger.logger.addHandler(handler)
        logger.logger.setLevel(logging.INFO)
        try:
            logger.log_execution_start()
            logger.log_execution_end(success=False, status="failed")
        finally:
            logger.logger.removeHandler(handler)
            logger.logger.setLevel(logging.NOTSET)

        end = json.loads(stream.getvalue().splitlines()[-1])
        assert end["execution_success"] is False
        assert isinstance(end["execution_duration_seconds"], float)
        assert end["execution_duration_seconds"] >= 0
        assert end["status"] == "failed"
        assert "execution_end" in end

    def test_generated_execution_id(self):
        logger = create_execution_logger("relay")

        assert logger.execution_id.startswith("exec_")
        assert new_execution_id().startswith("tick_")


class TestSetupStructuredLogging:
    """Unit tests for setup_structured_logging."""

    def setup_method(self):
        self.root = logging.getLogger()
        self.saved_handlers = self.root.handlers[:]
        self.saved_level = self.root.level

    def teardown_method(self):
        self.root.handlers[:] = self.saved_handlers
        self.root.setLevel(self.saved_level)

    def test_installs_structured_handler(self):
        setup_structured_logging("debug")

        assert self.root.level == logging.DEBUG
        assert len(self.root.handlers) == 1
        assert isinstance(self.root.handlers[0].formatter, StructuredFormatter)

    def test_unknown_level_is_rejected(self):
        with pytest.raises(ValueError):
            setup_structured_logging("chatty")
