from __future__ import annotations

import asyncio
import io
import json
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any

import pytest
from prometheus_client import CollectorRegistry

from tickerlens.core.config import AggregationConfig
from tickerlens.core.logging import LogConfig, StructuredLogger, configure_logging
from tickerlens.core.models.records import SourceRecord
from tickerlens.core.monitoring import MetricsCollector
from tickerlens.core.services.aggregation import Aggregator
from tickerlens.core.services.collection import CollectionRunner, SourceCollector
from tickerlens.core.services.pipeline import AnalysisDataService

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=UTC)


@pytest.fixture()
def log_buffer() -> Iterator[io.StringIO]:
    buffer = io.StringIO()
    StructuredLogger(LogConfig(level="DEBUG", console_stream=buffer))
    yield buffer
    configure_logging()


def _records() -> list[SourceRecord]:
    return [
        SourceRecord(
            source_id="yahoo",
            collected_at=NOW,
            fields={"price.current": 100.0, "price.changePercent": 1.0, "price.volume": 10.0, "technical.rsi": 50.0},
        ),
        SourceRecord(
            source_id="kabutan",
            collected_at=NOW,
            fields={"price.current": 120.0, "fundamentals.per": 10.0, "fundamentals.pbr": 1.0},
        ),
    ]


def _service(registry: CollectorRegistry) -> AnalysisDataService:
    return AnalysisDataService(
        Aggregator(AggregationConfig(), clock=lambda: NOW),
        metrics=MetricsCollector(registry=registry),
    )


def test_prepare_aggregates_and_assesses(log_buffer: io.StringIO) -> None:
    registry = CollectorRegistry()

    prepared = _service(registry).prepare("7203.T", _records())

    assert prepared.aggregation.success is True
    assert prepared.quality.is_adequate is True
    assert prepared.ready_for_analysis is True
    assert registry.get_sample_value("tickerlens_aggregations_total", {"outcome": "success"}) == 1.0
    assert registry.get_sample_value("tickerlens_field_conflicts_total") == 1.0
    assert registry.get_sample_value("tickerlens_quality_score_count") == 1.0

    lines = [json.loads(line) for line in log_buffer.getvalue().splitlines()]
    assert any(line["message"] == "Aggregation complete" for line in lines)
    conflict = next(line for line in lines if line["message"].startswith("conflicting values"))
    assert conflict["level"] == "WARNING"
    assert conflict["context"]["entity_id"] == "7203.T"


def test_prepare_counts_rejected_records() -> None:
    registry = CollectorRegistry()
    records: list[Any] = [{"source_id": "broken"}, *_records()]

    prepared = _service(registry).prepare("7203.T", records)

    assert prepared.aggregation.rejected == 1
    assert registry.get_sample_value("tickerlens_rejected_records_total") == 1.0


def test_payload_includes_quality_and_failures() -> None:
    registry = CollectorRegistry()

    async def down(entity_id: str) -> Any:
        raise ConnectionError("unreachable")

    async def up(entity_id: str) -> Any:
        return {"price": {"current": 100.0, "changePercent": 0.5}}

    runner = CollectionRunner([SourceCollector("up", up), SourceCollector("down", down)], clock=lambda: NOW)

    prepared = asyncio.run(_service(registry).collect_and_prepare("7203.T", runner))
    payload = prepared.to_payload()

    assert payload["sources"] == ["up"]
    assert payload["quality"]["score"] == 25
    assert payload["collector_failures"] == [
        {"source_id": "down", "reason": "ConnectionError: unreachable", "code": "COLLECTION_ERROR"}
    ]
    assert prepared.ready_for_analysis is False
