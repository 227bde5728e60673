"""Tests for structured logging with trace propagation."""

from __future__ import annotations

import io
import json
from collections.abc import Iterator

import pytest

from tickerlens.core.logging import LogConfig, StructuredLogger, configure_logging, current_trace_id, log_context


def _read_records(stream: io.StringIO) -> list[dict[str, object]]:
    stream.seek(0)
    lines = [line for line in stream.getvalue().splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


@pytest.fixture(autouse=True)
def _restore_default_logging() -> Iterator[None]:
    yield
    configure_logging()


def _buffered_logger() -> tuple[StructuredLogger, io.StringIO]:
    buffer = io.StringIO()
    return StructuredLogger(LogConfig(console_stream=buffer, console_output=True, file_output=False)), buffer


def test_structured_log_contains_trace_and_context() -> None:
    logger, buffer = _buffered_logger()

    with logger.context(trace_id="trace-123", source="kabutan", error_code="COLLECTOR_TIMEOUT", entity_id="7203.T"):
        logger.logger.info("collector timed out", attempt=2)

    records = _read_records(buffer)
    assert len(records) == 1
    record = records[0]
    assert record["trace_id"] == "trace-123"
    assert record["source"] == "kabutan"
    assert record["error_code"] == "COLLECTOR_TIMEOUT"
    assert record["level"] == "INFO"
    assert record["message"] == "collector timed out"
    assert record["context"]["entity_id"] == "7203.T"
    assert record["context"]["attempt"] == 2


def test_bound_values_win_over_context_values() -> None:
    logger, buffer = _buffered_logger()

    with logger.context(source="yahoo"):
        logger.logger.bind(source="kabutan").warning("conflict detected")

    assert _read_records(buffer)[0]["source"] == "kabutan"


def test_trace_id_propagates_within_context() -> None:
    logger, buffer = _buffered_logger()

    with logger.context() as trace_id:
        logger.logger.info("first event")
        logger.logger.info("second event")

    logger.logger.info("outside context")

    records = _read_records(buffer)
    assert len(records) == 3
    assert records[0]["trace_id"] == records[1]["trace_id"] == trace_id
    assert records[2]["trace_id"] != records[0]["trace_id"]


def test_trace_id_generated_when_missing() -> None:
    logger, buffer = _buffered_logger()

    logger.logger.info("single message")

    trace_id = _read_records(buffer)[0]["trace_id"]
    assert isinstance(trace_id, str)
    assert len(trace_id) == 32
    assert all(character in "0123456789abcdef" for character in trace_id)


def test_current_trace_id_matches_active_context() -> None:
    with log_context(trace_id="abc") as active:
        assert active == "abc"
        assert current_trace_id() == "abc"


def test_level_filters_lower_records() -> None:
    buffer = io.StringIO()
    logger = StructuredLogger(LogConfig(level="WARNING", console_stream=buffer))

    logger.logger.info("dropped")
    logger.logger.warning("kept")

    assert [record["message"] for record in _read_records(buffer)] == ["kept"]
