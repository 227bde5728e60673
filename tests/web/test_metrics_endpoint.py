"""Integration tests for the metrics endpoint."""

from fastapi.testclient import TestClient
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry

from tickerlens.core.config import TickerLensConfig
from tickerlens.core.monitoring.metrics import MetricsCollector, configure_metrics_collector
from tickerlens.web.app import create_app


def test_metrics_endpoint_exposes_prometheus_payload() -> None:
    registry = CollectorRegistry()
    collector = MetricsCollector(registry=registry)
    configure_metrics_collector(collector)

    app = create_app(TickerLensConfig())
    collector.observe_collection("yahoo", 0.12, success=True)

    client = TestClient(app)
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "tickerlens_collection_latency_seconds" in response.text
    assert "tickerlens_collector_requests_total" in response.text
    assert response.headers["content-type"] == CONTENT_TYPE_LATEST


def test_aggregate_requests_are_counted() -> None:
    collector = MetricsCollector(registry=CollectorRegistry())
    configure_metrics_collector(collector)
    client = TestClient(create_app(TickerLensConfig()))

    client.post(
        "/api/v1/analysis/aggregate",
        json={
            "entity_id": "7203.T",
            "records": [
                {"source_id": "a", "collected_at": "2024-05-01T09:00:00Z", "fields": {"price": {"current": 100}}},
                {"source_id": "b", "collected_at": "2024-05-01T09:00:00Z", "fields": {"price": {"current": 130}}},
            ],
            "as_of": "2024-05-01T10:00:00Z",
        },
    )
    response = client.get("/metrics")

    assert 'tickerlens_aggregations_total{outcome="success"} 1.0' in response.text
    assert "tickerlens_field_conflicts_total 1.0" in response.text
