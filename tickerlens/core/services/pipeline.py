"""Prepare analysis input: collect, aggregate and assess one entity."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from time import perf_counter
from typing import Any

from tickerlens.core.exceptions import ErrorCode
from tickerlens.core.logging import bind, log_context
from tickerlens.core.models.quality import QualityReport
from tickerlens.core.monitoring import MetricsCollector
from tickerlens.core.services.aggregation import AggregationResult, Aggregator, SourceInput
from tickerlens.core.services.collection import CollectionRunner, CollectorFailure
from tickerlens.core.services.quality import QualityAssessor


@dataclass(frozen=True)
class PreparedData:
    """Aggregated record plus its quality verdict."""

    aggregation: AggregationResult
    quality: QualityReport
    failures: tuple[CollectorFailure, ...] = ()

    @property
    def ready_for_analysis(self) -> bool:
        return self.aggregation.success and self.quality.is_adequate

    def to_payload(self) -> dict[str, Any]:
        payload = self.aggregation.to_payload()
        payload["quality"] = self.quality.model_dump(mode="json")
        if self.failures:
            payload["collector_failures"] = [
                {"source_id": failure.source_id, "reason": failure.reason, "code": failure.error_code}
                for failure in self.failures
            ]
        return payload


class AnalysisDataService:
    """Wires the pure aggregator and assessor to logging and metrics."""

    def __init__(
        self,
        aggregator: Aggregator | None = None,
        assessor: QualityAssessor | None = None,
        *,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self.aggregator = aggregator or Aggregator()
        self.assessor = assessor or QualityAssessor()
        self.metrics = metrics

    def prepare(
        self,
        entity_id: str,
        records: Sequence[SourceInput],
        *,
        as_of: datetime | None = None,
        failures: Sequence[CollectorFailure] = (),
    ) -> PreparedData:
        """Aggregate ``records`` and assess the result."""

        with log_context(entity_id=entity_id):
            log = bind(component="AnalysisDataService", entity_id=entity_id)
            start = perf_counter()

            aggregation = self.aggregator.aggregate(entity_id, records, as_of=as_of)
            quality = self.assessor.assess(aggregation.data)
            elapsed_ms = (perf_counter() - start) * 1000

            conflicts = len(aggregation.data.conflicts)

            log.info(
                "Aggregation complete",
                extra={
                    "success": aggregation.success,
                    "confidence": aggregation.confidence,
                    "sources": list(aggregation.sources),
                    "conflicts": conflicts,
                    "quality_score": quality.score,
                    "adequate": quality.is_adequate,
                    "duration_ms": round(elapsed_ms, 3),
                },
            )
            for warning in aggregation.warnings:
                log.warning(warning)
            for error in aggregation.errors:
                log.bind(error_code=ErrorCode.AGGREGATION_ERROR.value).error(error)

            if self.metrics is not None:
                self.metrics.observe_aggregation(
                    success=aggregation.success,
                    confidence=aggregation.confidence,
                    conflicts=conflicts,
                    rejected=aggregation.rejected,
                )
                self.metrics.observe_quality(quality.score)

        return PreparedData(aggregation=aggregation, quality=quality, failures=tuple(failures))

    async def collect_and_prepare(
        self,
        entity_id: str,
        runner: CollectionRunner,
        *,
        as_of: datetime | None = None,
    ) -> PreparedData:
        """Run ``runner`` for ``entity_id`` and prepare whatever it gathered."""

        outcome = await runner.run(entity_id)
        return self.prepare(entity_id, outcome.records, as_of=as_of, failures=outcome.failures)


__all__ = ["AnalysisDataService", "PreparedData"]
