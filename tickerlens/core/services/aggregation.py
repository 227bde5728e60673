"""Merge sparse source records into one canonical record with provenance."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from tickerlens.core.config.settings import AggregationConfig
from tickerlens.core.exceptions import DataValidationError
from tickerlens.core.models.fields import FieldKind, FieldPath, NewsItem
from tickerlens.core.models.records import (
    CanonicalRecord,
    ResolvedField,
    SourceRecord,
    coerce_fields,
    flatten_payload,
)
from tickerlens.core.validation.plausibility import check_plausibility
from tickerlens.core.validation.tolerance import SourceValue, group_equivalent, resolve_tolerance

SourceInput = SourceRecord | Mapping[str, Any]


@dataclass(frozen=True)
class AggregationResult:
    """Outcome of one aggregation call.

    ``success`` is false only when none of the required fields could be
    resolved; partial data with warnings is still a success.
    """

    success: bool
    data: CanonicalRecord
    rejected: int = 0

    @property
    def sources(self) -> tuple[str, ...]:
        return self.data.sources

    @property
    def confidence(self) -> int:
        return self.data.confidence

    @property
    def errors(self) -> tuple[str, ...]:
        return self.data.errors

    @property
    def warnings(self) -> tuple[str, ...]:
        return self.data.warnings

    def to_payload(self) -> dict[str, Any]:
        """Return the mapping handed to downstream analysis callers."""

        return {
            "success": self.success,
            "data": self.data.model_dump(mode="json"),
            "sources": list(self.sources),
            "confidence": self.confidence,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class Aggregator:
    """Resolve per-field conflicts across collectors and score the merge."""

    def __init__(
        self,
        config: AggregationConfig | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or AggregationConfig()
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def config(self) -> AggregationConfig:
        return self._config

    def aggregate(
        self,
        entity_id: str,
        records: Sequence[SourceInput],
        *,
        as_of: datetime | None = None,
    ) -> AggregationResult:
        """Merge ``records`` for ``entity_id``.

        Malformed inputs, stale records, conflicts and implausible values are
        reported through ``errors``/``warnings``; nothing here raises for a
        data condition.
        """

        entity_id = entity_id.strip()
        if not entity_id:
            raise DataValidationError("entity_id must not be blank")

        errors: list[str] = []
        warnings: list[str] = []

        accepted = self._order_by_priority(self._accept(records, errors, warnings))
        if not accepted:
            errors.append(f"no usable source records for {entity_id}")

        self._flag_stale(accepted, as_of or self._clock(), warnings)

        fields: dict[FieldPath, ResolvedField] = {}
        for path in FieldPath:
            pairs = [(record.source_id, record.fields[path]) for record in accepted if path in record.fields]
            if pairs:
                fields[path] = self._resolve(path, pairs, warnings)

        reporters = {source for resolved in fields.values() for source in resolved.reported_by}
        sources = tuple(record.source_id for record in accepted if record.source_id in reporters)
        missing_required = tuple(path for path in self._config.required_fields if path not in fields)

        for issue in check_plausibility({path: resolved.value for path, resolved in fields.items()}):
            (errors if issue.fatal else warnings).append(f"implausible value {issue.describe()}")

        required = self._config.required_fields
        success = len(missing_required) < len(required) if required else bool(fields)

        canonical = CanonicalRecord(
            entity_id=entity_id,
            fields=fields,
            sources=sources,
            confidence=self._confidence(fields, missing_required),
            errors=tuple(errors),
            warnings=tuple(warnings),
            missing_required=missing_required,
        )
        return AggregationResult(success=success, data=canonical, rejected=len(records) - len(accepted))

    def _accept(
        self,
        records: Sequence[SourceInput],
        errors: list[str],
        warnings: list[str],
    ) -> list[SourceRecord]:
        accepted: list[SourceRecord] = []
        seen: set[str] = set()
        for index, item in enumerate(records, start=1):
            record = self._coerce(index, item, errors, warnings)
            if record is None:
                continue
            if record.source_id in seen:
                errors.append(f"duplicate record #{index} from source '{record.source_id}' ignored")
                continue
            seen.add(record.source_id)
            warnings.extend(record.dropped)
            accepted.append(record)
        return accepted

    @staticmethod
    def _coerce(index: int, item: Any, errors: list[str], warnings: list[str]) -> SourceRecord | None:
        if isinstance(item, SourceRecord):
            return item
        if not isinstance(item, Mapping):
            errors.append(f"rejected source record #{index}: unsupported type {type(item).__name__}")
            return None

        label = str(item.get("source_id") or item.get("sourceId") or "unknown source").strip()
        payload = dict(item)
        raw_fields = payload.get("fields")
        if isinstance(raw_fields, Mapping):
            flat, unknown = flatten_payload(raw_fields)
            for key in unknown:
                warnings.append(f"ignored unknown field '{key}' from source '{label}'")
            # Only identity and timestamp can reject a record; bad values are dropped one by one.
            fields, dropped = coerce_fields(flat, label)
            payload["fields"] = fields
            payload["dropped"] = tuple(dropped)

        try:
            return SourceRecord.model_validate(payload)
        except ValidationError as exc:
            errors.append(f"rejected source record #{index} ({label}): {_summarize(exc)}")
            return None

    def _order_by_priority(self, records: list[SourceRecord]) -> list[SourceRecord]:
        if not self._config.source_priority:
            return records
        rank = {source: position for position, source in enumerate(self._config.source_priority)}
        unlisted = len(rank)
        return sorted(records, key=lambda record: rank.get(record.source_id, unlisted))

    def _flag_stale(self, records: Sequence[SourceRecord], reference: datetime, warnings: list[str]) -> None:
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=UTC)
        for record in records:
            if reference - record.collected_at > self._config.max_age:
                warnings.append(
                    f"stale record from '{record.source_id}': collected at "
                    f"{record.collected_at.isoformat()}, older than {self._config.max_age}"
                )

    def _resolve(self, path: FieldPath, pairs: list[SourceValue], warnings: list[str]) -> ResolvedField:
        reported_by = tuple(source for source, _ in pairs)
        winner_source, winner_value = pairs[0]

        if path.kind is FieldKind.NEWS:
            return ResolvedField(
                value=self._merge_news(pairs),
                contributing_source=winner_source,
                agreement=True,
                reported_by=reported_by,
            )

        agreement = True
        if len(pairs) > 1:
            classes = group_equivalent(pairs, resolve_tolerance(path, self._config.tolerances))
            if len(classes) > 1:
                agreement = False
                listed = ", ".join(f"{source}={_format_value(value)}" for source, value in pairs)
                warnings.append(f"conflicting values for {path.value}: {listed}; using {winner_source}")

        return ResolvedField(
            value=winner_value,
            contributing_source=winner_source,
            agreement=agreement,
            reported_by=reported_by,
        )

    def _merge_news(self, pairs: list[SourceValue]) -> tuple[NewsItem, ...]:
        seen: set[str] = set()
        merged: list[NewsItem] = []
        for _, items in pairs:
            for item in items:
                if item.dedupe_key in seen:
                    continue
                seen.add(item.dedupe_key)
                merged.append(item)
        merged.sort(key=_news_order)
        return tuple(merged[: self._config.max_news_items])

    def _confidence(self, fields: Mapping[FieldPath, ResolvedField], missing_required: Sequence[FieldPath]) -> int:
        config = self._config
        score = 100 - config.required_missing_penalty * len(missing_required)
        present = {path.category for path in fields}
        score -= config.category_missing_penalty * sum(
            1 for category in config.penalized_categories if category not in present
        )
        score -= config.conflict_penalty * sum(1 for resolved in fields.values() if not resolved.agreement)
        return max(0, min(100, score))


def _news_order(item: NewsItem) -> tuple[bool, float]:
    # Newest first, undated headlines last.
    if item.published_at is None:
        return (True, 0.0)
    return (False, -item.published_at.timestamp())


def _format_value(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return repr(value)
    return str(value)


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


def aggregate(
    entity_id: str,
    records: Sequence[SourceInput],
    config: AggregationConfig | None = None,
    *,
    as_of: datetime | None = None,
) -> AggregationResult:
    """Convenience wrapper around :meth:`Aggregator.aggregate`."""

    return Aggregator(config).aggregate(entity_id, records, as_of=as_of)


__all__ = ["AggregationResult", "Aggregator", "SourceInput", "aggregate"]
