"""Tests for the Prometheus metrics collector."""

from prometheus_client import CollectorRegistry

from tickerlens.core.monitoring.metrics import (
    MetricsCollector,
    configure_metrics_collector,
    get_metrics_collector,
)


def test_observe_collection_updates_metrics() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.observe_collection("yahoo", 0.25, success=True)
    collector.observe_collection("yahoo", 0.50, success=False)

    assert registry.get_sample_value("tickerlens_collection_latency_seconds_count") == 2.0
    assert registry.get_sample_value("tickerlens_collection_latency_seconds_sum") == 0.75
    assert registry.get_sample_value("tickerlens_collector_requests_total", {"source": "yahoo"}) == 2.0
    assert registry.get_sample_value("tickerlens_collector_failures_total", {"source": "yahoo"}) == 1.0
    assert registry.get_sample_value("tickerlens_collector_error_rate", {"source": "yahoo"}) == 0.5


def test_increment_failure_without_latency_updates_counters() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.increment_failure("kabutan")

    assert registry.get_sample_value("tickerlens_collector_requests_total", {"source": "kabutan"}) == 1.0
    assert registry.get_sample_value("tickerlens_collector_failures_total", {"source": "kabutan"}) == 1.0
    assert registry.get_sample_value("tickerlens_collector_error_rate", {"source": "kabutan"}) == 1.0


def test_observe_aggregation_tracks_outcomes_and_scores() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)

    collector.observe_aggregation(success=True, confidence=85, conflicts=2, rejected=1)
    collector.observe_aggregation(success=False, confidence=30)
    collector.observe_quality(65)

    assert registry.get_sample_value("tickerlens_aggregations_total", {"outcome": "success"}) == 1.0
    assert registry.get_sample_value("tickerlens_aggregations_total", {"outcome": "failure"}) == 1.0
    assert registry.get_sample_value("tickerlens_field_conflicts_total") == 2.0
    assert registry.get_sample_value("tickerlens_rejected_records_total") == 1.0
    assert registry.get_sample_value("tickerlens_confidence_score_sum") == 115.0
    assert registry.get_sample_value("tickerlens_confidence_score_bucket", {"le": "30.0"}) == 1.0
    assert registry.get_sample_value("tickerlens_quality_score_count") == 1.0


def test_render_produces_exposition_text() -> None:
    collector = MetricsCollector(registry=CollectorRegistry())
    collector.observe_quality(40)

    assert b"tickerlens_quality_score_bucket" in collector.render()


def test_global_collector_can_be_overridden() -> None:
    custom = MetricsCollector(registry=CollectorRegistry())

    configure_metrics_collector(custom)
    assert get_metrics_collector() is custom

    configure_metrics_collector(None)
    assert get_metrics_collector() is not custom
