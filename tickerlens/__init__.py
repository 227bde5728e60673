"""tickerlens - multi-source stock data aggregation.

Merges sparse, possibly conflicting per-source records into one canonical
record with per-field provenance and a confidence score, then grades how fit
that record is for downstream analysis.
"""

from tickerlens.core.config.settings import AggregationConfig, QualityPolicy
from tickerlens.core.models.fields import FieldPath, NewsItem
from tickerlens.core.models.quality import QualityReport
from tickerlens.core.models.records import CanonicalRecord, ResolvedField, SourceRecord
from tickerlens.core.services.aggregation import AggregationResult, Aggregator, aggregate
from tickerlens.core.services.quality import QualityAssessor, assess_quality, format_quality_report

# Version
__version__ = "0.1.0"

__all__ = [
    "AggregationConfig",
    "AggregationResult",
    "Aggregator",
    "CanonicalRecord",
    "FieldPath",
    "NewsItem",
    "QualityAssessor",
    "QualityPolicy",
    "QualityReport",
    "ResolvedField",
    "SourceRecord",
    "aggregate",
    "assess_quality",
    "format_quality_report",
]
