"""
Tests for logging helpers.

System role: Verification of safe structured logging
"""

import logging

from backend.observability.correlation import clear_correlation_id, set_correlation_id
from backend.observability.log_utils import log_exception_with_context, safe_log_value


class TestSafeLogValue:
    """Test suite for safe_log_value."""

    def test_should_summarise_collections_and_bytes(self):
        assert safe_log_value(None) == "None"
        assert safe_log_value(b"%PDF-1.4") == "bytes(8)"
        assert safe_log_value([1, 2, 3]) == "list(3 items)"
        assert safe_log_value({"a": 1}) == "dict(1 keys)"
        assert safe_log_value(42) == "42"

    def test_should_truncate_long_strings(self):
        result = safe_log_value("x" * 20, max_length=5)

        assert result == "xxxxx... (truncated, 20 total)"

    def test_should_survive_broken_str(self):
        class Broken:
            def __str__(self):
                raise RuntimeError("no")

        assert safe_log_value(Broken()) == "<unable to log: RuntimeError>"


class TestLogExceptionWithContext:
    """Test suite for log_exception_with_context."""

    def test_should_log_warning_with_context(self, caplog):
        logger = logging.getLogger("tests.log_utils")
        set_correlation_id("req-1")
        try:
            with caplog.at_level(logging.WARNING, logger="tests.log_utils"):
                log_exception_with_context(logger, "Audit write failed", ValueError("bad"), rows=[1, 2])
        finally:
            clear_correlation_id()

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.error_type == "ValueError"
        assert record.error_msg == "bad"
        assert record.rows == "list(2 items)"
        assert record.correlation_id == "req-1"
