"""Prometheus metrics helpers for TickerLens services."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import DefaultDict

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

_SCORE_BUCKETS = (10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0, 80.0, 90.0, 100.0, float("inf"))


@dataclass
class _CollectorStats:
    """Internal container tracking collector level success and failure counts."""

    total: int = 0
    failures: int = 0


class MetricsCollector:
    """Collects and exposes core Prometheus metrics for aggregation runs."""

    def __init__(self, *, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self.aggregations_total = Counter(
            "tickerlens_aggregations_total",
            "Aggregation runs grouped by outcome.",
            ("outcome",),
            registry=self.registry,
        )
        self.field_conflicts_total = Counter(
            "tickerlens_field_conflicts_total",
            "Fields on which sources disagreed beyond tolerance.",
            registry=self.registry,
        )
        self.rejected_records_total = Counter(
            "tickerlens_rejected_records_total",
            "Source records dropped during aggregation.",
            registry=self.registry,
        )
        self.confidence_score = Histogram(
            "tickerlens_confidence_score",
            "Distribution of canonical record confidence scores.",
            buckets=_SCORE_BUCKETS,
            registry=self.registry,
        )
        self.quality_score = Histogram(
            "tickerlens_quality_score",
            "Distribution of quality assessment scores.",
            buckets=_SCORE_BUCKETS,
            registry=self.registry,
        )
        self.collection_latency_seconds = Histogram(
            "tickerlens_collection_latency_seconds",
            "Latency distribution for source collectors.",
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, float("inf")),
            registry=self.registry,
        )
        self.collector_requests_total = Counter(
            "tickerlens_collector_requests_total",
            "Total count of source collector invocations.",
            ("source",),
            registry=self.registry,
        )
        self.collector_failures_total = Counter(
            "tickerlens_collector_failures_total",
            "Total count of failed source collector invocations.",
            ("source",),
            registry=self.registry,
        )
        self.collector_error_rate = Gauge(
            "tickerlens_collector_error_rate",
            "Rolling error rate for source collectors (0-1 range).",
            ("source",),
            registry=self.registry,
        )
        self._collector_stats: DefaultDict[str, _CollectorStats] = defaultdict(_CollectorStats)

    def observe_aggregation(
        self,
        *,
        success: bool,
        confidence: int,
        conflicts: int = 0,
        rejected: int = 0,
    ) -> None:
        """Record the outcome of a single aggregation run."""

        self.aggregations_total.labels(outcome="success" if success else "failure").inc()
        self.confidence_score.observe(confidence)
        if conflicts:
            self.field_conflicts_total.inc(conflicts)
        if rejected:
            self.rejected_records_total.inc(rejected)

    def observe_quality(self, score: int) -> None:
        self.quality_score.observe(score)

    def observe_collection(self, source: str, latency_seconds: float, *, success: bool = True) -> None:
        """Record a collector execution."""

        self.collection_latency_seconds.observe(latency_seconds)
        self._record_outcome(source=source, success=success)

    def increment_failure(self, source: str) -> None:
        """Increment failure counters when a collector fails before latency is captured."""

        self._record_outcome(source=source, success=False)

    def render(self) -> bytes:
        """Render metrics in Prometheus exposition format."""

        return generate_latest(self.registry)

    def _record_outcome(self, *, source: str, success: bool) -> None:
        stats = self._collector_stats[source]
        stats.total += 1
        self.collector_requests_total.labels(source=source).inc()
        if not success:
            stats.failures += 1
            self.collector_failures_total.labels(source=source).inc()
        error_rate = stats.failures / stats.total if stats.total else 0.0
        self.collector_error_rate.labels(source=source).set(error_rate)


_DEFAULT_COLLECTOR: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the global metrics collector instance."""

    global _DEFAULT_COLLECTOR
    if _DEFAULT_COLLECTOR is None:
        _DEFAULT_COLLECTOR = MetricsCollector()
    return _DEFAULT_COLLECTOR


def configure_metrics_collector(collector: MetricsCollector | None) -> None:
    """Override the global metrics collector for application wiring or tests."""

    global _DEFAULT_COLLECTOR
    _DEFAULT_COLLECTOR = collector
