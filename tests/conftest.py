"""Pytest configuration for the tickerlens test suite."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tickerlens.core.monitoring.metrics import configure_metrics_collector


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--tickerlens-run-integration",
        action="store_true",
        default=False,
        help="Run tickerlens integration tests that require external services.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for tickerlens tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks tickerlens tests requiring network or external services",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--tickerlens-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --tickerlens-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _reset_metrics_collector() -> Iterator[None]:
    yield
    configure_metrics_collector(None)
