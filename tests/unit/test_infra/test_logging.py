"""Tests for log context injection and formatters."""

from __future__ import annotations

import json
import sys
import logging

import pytest

from ledger_gateway.infra.logging import (
    ContextInjectingFilter,
    ContextTextFormatter,
    JSONFormatter,
    clear_log_context,
    get_log_context,
    set_log_context,
)


def make_record(message: str = "Resolving checkpoint", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="ledger_gateway.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestLogContext:
    def test_set_merges_fields(self) -> None:
        set_log_context(correlation_id="abc")
        set_log_context(operation_name="Q")

        assert get_log_context() == {"correlation_id": "abc", "operation_name": "Q"}

    def test_clear(self) -> None:
        set_log_context(correlation_id="abc")
        clear_log_context()

        assert get_log_context() == {}

    def test_filter_injects_without_overwriting(self) -> None:
        set_log_context(correlation_id="from-context", method="ctx")
        record = make_record(method="sui_getCheckpoint")

        assert ContextInjectingFilter().filter(record) is True
        assert record.correlation_id == "from-context"
        assert record.method == "sui_getCheckpoint"


@pytest.mark.unit
class TestJSONFormatter:
    def test_one_json_object_per_record(self) -> None:
        formatter = JSONFormatter(static={"service": "ledger-gateway"})
        record = make_record(method="sui_getCheckpoint", correlation_id="abc")

        data = json.loads(formatter.format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "ledger_gateway.test"
        assert data["message"] == "Resolving checkpoint"
        assert data["service"] == "ledger-gateway"
        assert data["method"] == "sui_getCheckpoint"
        assert data["correlation_id"] == "abc"
        assert data["timestamp"].endswith("Z")
        assert "trace_id" not in data

    def test_exception_stays_on_one_line(self) -> None:
        formatter = JSONFormatter()
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record()
            record.exc_info = sys.exc_info()

        output = formatter.format(record)

        assert "\n" not in output
        assert "ValueError: boom" in json.loads(output)["exception"]


@pytest.mark.unit
def test_text_formatter_appends_extras() -> None:
    formatter = ContextTextFormatter()

    output = formatter.format(make_record(method="sui_getCheckpoint", correlation_id="abc"))

    assert "Resolving checkpoint" in output
    assert output.endswith("[correlation_id=abc method=sui_getCheckpoint]")
