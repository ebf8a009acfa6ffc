"""
Test suite for logging helpers and correlation IDs.

System role: Verification of the observability layer
"""

import logging

import pytest

from incident_docs.observability import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from incident_docs.observability.log_utils import (
    log_exception_with_context,
    redact_url,
    safe_log_value,
)
from incident_docs.observability.logger import CorrelationIdFilter


@pytest.fixture(autouse=True)
def reset_correlation_id():
    yield
    clear_correlation_id()


class TestSafeLogValue:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, "None"),
            (b"\x00\x01\x02", "<3 bytes>"),
            ([1, 2], "list(2 items)"),
            ({"a": 1}, "dict(1 keys)"),
            (42, "42"),
        ],
    )
    def test_converts_values(self, value, expected: str) -> None:
        assert safe_log_value(value) == expected

    def test_truncates_long_strings(self) -> None:
        text = safe_log_value("x" * 600, max_length=10)

        assert text.startswith("x" * 10)
        assert "600 total" in text


class TestRedactUrl:
    def test_drops_query_and_fragment(self) -> None:
        assert redact_url("https://files.forms.test/a/b.jpg?token=secret#frag") == "https://files.forms.test/a/b.jpg"

    def test_handles_missing_url(self) -> None:
        assert redact_url(None) == "None"


class TestCorrelationId:
    def test_generates_id_when_none_given(self) -> None:
        value = set_correlation_id()

        assert value
        assert get_correlation_id() == value

    def test_filter_stamps_records(self) -> None:
        # Arrange
        set_correlation_id("req-1")
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)

        # Act
        CorrelationIdFilter().filter(record)

        # Assert
        assert record.correlation_id == "req-1"

    def test_filter_uses_dash_outside_context(self) -> None:
        record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello", None, None)

        CorrelationIdFilter().filter(record)

        assert record.correlation_id == "-"


class TestLogExceptionWithContext:
    def test_attaches_error_fields(self, caplog) -> None:
        # Arrange
        logger = logging.getLogger("incident_docs.tests")

        # Act
        with caplog.at_level(logging.ERROR, logger="incident_docs.tests"):
            try:
                raise RuntimeError("boom")
            except RuntimeError as e:
                log_exception_with_context(logger, "step failed", e, document_id=123)

        # Assert
        record = caplog.records[-1]
        assert record.error_type == "RuntimeError"
        assert record.error_msg == "boom"
        assert record.document_id == "123"
        assert record.exc_info is not None
