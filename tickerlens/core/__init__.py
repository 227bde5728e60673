"""tickerlens core - models, aggregation and quality services."""

from tickerlens.core.config.settings import AggregationConfig, ConfigManager, QualityPolicy, TickerLensConfig
from tickerlens.core.models.records import CanonicalRecord, SourceRecord
from tickerlens.core.services.aggregation import Aggregator
from tickerlens.core.services.quality import QualityAssessor

__all__ = [
    "AggregationConfig",
    "Aggregator",
    "CanonicalRecord",
    "ConfigManager",
    "QualityAssessor",
    "QualityPolicy",
    "SourceRecord",
    "TickerLensConfig",
]
