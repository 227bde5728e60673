"""Concurrent execution of source collectors."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from tickerlens.core.data.extraction import parse_json_object
from tickerlens.core.exceptions import ErrorCode, TickerLensError
from tickerlens.core.logging import bind
from tickerlens.core.models.records import SourceRecord
from tickerlens.core.monitoring import MetricsCollector

CollectorResult = SourceRecord | Mapping[str, Any] | str
FetchFn = Callable[[str], Awaitable[CollectorResult]]

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class SourceCollector:
    """A named async callable producing one source's view of an entity.

    ``fetch`` may return a ready :class:`SourceRecord`, a nested field payload
    such as ``{"price": {"current": 1.0}}``, or raw text wrapping such a
    payload in JSON.
    """

    source_id: str
    fetch: FetchFn
    timeout: float | None = None


@dataclass(frozen=True)
class CollectorFailure:
    source_id: str
    reason: str
    error_code: str = ErrorCode.COLLECTION_ERROR.value

    def describe(self) -> str:
        return f"collector '{self.source_id}' failed: {self.reason}"


@dataclass(frozen=True)
class CollectionOutcome:
    """Records gathered for one entity, in declared collector order."""

    entity_id: str
    records: tuple[SourceRecord, ...] = ()
    failures: tuple[CollectorFailure, ...] = field(default_factory=tuple)

    @property
    def failed_sources(self) -> tuple[str, ...]:
        return tuple(failure.source_id for failure in self.failures)


class CollectionRunner:
    """Run every collector concurrently, each under its own timeout."""

    def __init__(
        self,
        collectors: Sequence[SourceCollector],
        *,
        timeout: float = DEFAULT_TIMEOUT,
        metrics: MetricsCollector | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        seen: set[str] = set()
        for collector in collectors:
            if collector.source_id in seen:
                raise ValueError(f"duplicate collector source id: {collector.source_id}")
            seen.add(collector.source_id)
        self._collectors = tuple(collectors)
        self._timeout = timeout
        self._metrics = metrics
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def collectors(self) -> tuple[SourceCollector, ...]:
        return self._collectors

    async def run(self, entity_id: str) -> CollectionOutcome:
        """Collect ``entity_id`` from every source; failures never abort the batch."""

        log = bind(component="CollectionRunner", entity_id=entity_id)
        log.info("Starting collection", extra={"collectors": len(self._collectors)})

        results = await asyncio.gather(*(self._run_one(collector, entity_id) for collector in self._collectors))

        records: list[SourceRecord] = []
        failures: list[CollectorFailure] = []
        for result in results:
            if isinstance(result, CollectorFailure):
                log.bind(source=result.source_id, error_code=result.error_code).warning(result.describe())
                failures.append(result)
            else:
                records.append(result)

        log.info(
            "Collection finished",
            extra={"records": len(records), "failures": len(failures)},
        )
        return CollectionOutcome(entity_id=entity_id, records=tuple(records), failures=tuple(failures))

    async def _run_one(self, collector: SourceCollector, entity_id: str) -> SourceRecord | CollectorFailure:
        timeout = collector.timeout or self._timeout
        start = perf_counter()
        try:
            result = await asyncio.wait_for(collector.fetch(entity_id), timeout=timeout)
            record = self._to_record(collector.source_id, result)
        except TimeoutError:
            self._observe_failure(collector.source_id)
            return CollectorFailure(
                source_id=collector.source_id,
                reason=f"timed out after {timeout:g}s",
                error_code=ErrorCode.COLLECTOR_TIMEOUT.value,
            )
        except TickerLensError as exc:
            self._observe_failure(collector.source_id)
            return CollectorFailure(collector.source_id, exc.message, exc.error_code)
        except ValidationError as exc:
            self._observe_failure(collector.source_id)
            return CollectorFailure(
                collector.source_id,
                f"invalid payload ({exc.error_count()} validation errors)",
                ErrorCode.VALIDATION_ERROR.value,
            )
        except Exception as exc:
            self._observe_failure(collector.source_id)
            return CollectorFailure(collector.source_id, f"{type(exc).__name__}: {exc}")

        if self._metrics is not None:
            self._metrics.observe_collection(collector.source_id, perf_counter() - start)
        return record

    def _to_record(self, source_id: str, result: CollectorResult) -> SourceRecord:
        if isinstance(result, SourceRecord):
            if result.source_id != source_id:
                return result.model_copy(update={"source_id": source_id})
            return result
        if isinstance(result, str):
            result = parse_json_object(result)
        if not isinstance(result, Mapping):
            raise TypeError(f"unsupported collector result {type(result).__name__}")
        return SourceRecord.from_payload(source_id, result, collected_at=self._clock())

    def _observe_failure(self, source_id: str) -> None:
        if self._metrics is not None:
            self._metrics.increment_failure(source_id)


__all__ = [
    "CollectionOutcome",
    "CollectionRunner",
    "CollectorFailure",
    "CollectorResult",
    "DEFAULT_TIMEOUT",
    "SourceCollector",
]
