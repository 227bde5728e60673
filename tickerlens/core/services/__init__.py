"""Services module - business logic layer."""

from tickerlens.core.services.aggregation import AggregationResult, Aggregator, aggregate
from tickerlens.core.services.collection import (
    CollectionOutcome,
    CollectionRunner,
    CollectorFailure,
    SourceCollector,
)
from tickerlens.core.services.pipeline import AnalysisDataService, PreparedData
from tickerlens.core.services.quality import QualityAssessor, assess_quality, format_quality_report

__all__ = [
    "AggregationResult",
    "Aggregator",
    "AnalysisDataService",
    "CollectionOutcome",
    "CollectionRunner",
    "CollectorFailure",
    "PreparedData",
    "QualityAssessor",
    "SourceCollector",
    "aggregate",
    "assess_quality",
    "format_quality_report",
]
