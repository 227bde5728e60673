"""Source and canonical record models."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from decimal import Decimal
from math import isfinite
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from tickerlens.core.models.fields import FieldKind, FieldPath, NewsItem

NEWS_PAYLOAD_KEY = "news"


def flatten_payload(payload: Mapping[str, Any], prefix: str = "") -> tuple[dict[str, Any], list[str]]:
    """Flatten a nested collector payload into dotted field paths.

    Returns the known paths with their raw values and the dotted keys that are
    not part of the vocabulary.
    """

    flat: dict[str, Any] = {}
    unknown: list[str] = []
    for key, value in payload.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if dotted == NEWS_PAYLOAD_KEY:
            dotted = FieldPath.NEWS.value
        if FieldPath.parse(dotted) is not None:
            flat[dotted] = value
        elif isinstance(value, Mapping):
            nested, nested_unknown = flatten_payload(value, dotted)
            flat.update(nested)
            unknown.extend(nested_unknown)
        else:
            unknown.append(dotted)
    return flat, unknown


def _coerce_number(path: FieldPath, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{path.value} expects a number, got a boolean")
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", "").strip())
        except ValueError as exc:
            raise ValueError(f"{path.value} expects a number, got {value!r}") from exc
    else:
        raise ValueError(f"{path.value} expects a number, got {type(value).__name__}")
    if not isfinite(number):
        raise ValueError(f"{path.value} must be finite")
    return number


_NEWS_DATE_KEYS = frozenset({"publishedAt", "published_at"})


def _coerce_news(value: Any, issues: list[str] | None = None) -> tuple[NewsItem, ...] | None:
    # With ``issues`` given, bad entries are skipped and described instead of raising.
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValueError(f"{FieldPath.NEWS.value} expects a list of news items")
    items: list[NewsItem] = []
    for position, entry in enumerate(value, start=1):
        if isinstance(entry, NewsItem):
            items.append(entry)
            continue
        if isinstance(entry, Mapping) and not str(entry.get("title") or "").strip():
            # Headlines without a title cannot be deduplicated or displayed.
            continue
        if issues is None:
            items.append(NewsItem.model_validate(entry))
            continue
        if not isinstance(entry, Mapping):
            issues.append(f"news item #{position} is not an object")
            continue
        try:
            items.append(NewsItem.model_validate(entry))
        except ValidationError as exc:
            failed = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
            if not failed or not failed <= _NEWS_DATE_KEYS:
                issues.append(f"news item #{position} dropped: {exc.errors()[0]['msg']}")
                continue
            undated = {key: item for key, item in entry.items() if key not in _NEWS_DATE_KEYS}
            items.append(NewsItem.model_validate(undated))
            date = entry.get("publishedAt", entry.get("published_at"))
            issues.append(f"news item #{position} kept without its unparsable date {date!r}")
    return tuple(items) or None


def coerce_field_value(path: FieldPath, value: Any) -> Any:
    """Coerce ``value`` to the declared type of ``path``; ``None`` means absent."""

    if value is None:
        return None
    kind = path.kind
    if kind is FieldKind.NUMBER:
        return _coerce_number(path, value)
    if kind is FieldKind.TEXT:
        text = str(value).strip()
        return text or None
    return _coerce_news(value)


def coerce_fields(values: Mapping[Any, Any], source_id: str) -> tuple[dict[FieldPath, Any], list[str]]:
    """Coerce each field on its own, dropping values that do not fit their type.

    Returns the coerced fields and one warning per ignored value or news item,
    so a single bad value never costs the rest of the record.
    """

    fields: dict[FieldPath, Any] = {}
    dropped: list[str] = []
    for key, value in values.items():
        path = FieldPath.parse(key)
        if path is None:
            dropped.append(f"ignored unknown field '{key}' from source '{source_id}'")
            continue
        issues: list[str] = []
        try:
            if path.kind is FieldKind.NEWS and value is not None:
                coerced = _coerce_news(value, issues)
            else:
                coerced = coerce_field_value(path, value)
        except ValueError as exc:
            dropped.append(f"ignored invalid value for {path.value} from source '{source_id}': {exc}")
            continue
        prefix = f"ignored invalid value for {path.value} from source '{source_id}'"
        dropped.extend(f"{prefix}: {issue}" for issue in issues)
        if coerced is not None:
            fields[path] = coerced
    return fields, dropped


class SourceRecord(BaseModel):
    """One collector's sparse snapshot of an entity for one collection cycle."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_id: str = Field(validation_alias=AliasChoices("source_id", "sourceId"))
    collected_at: datetime = Field(validation_alias=AliasChoices("collected_at", "collectedAt"))
    fields: dict[FieldPath, Any] = Field(default_factory=dict)
    raw: Any = None
    # Warnings for values ignored while coercing a collector payload.
    dropped: tuple[str, ...] = ()

    @field_validator("source_id")
    @classmethod
    def _source_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("source_id must not be blank")
        return value

    @field_validator("collected_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("fields", mode="before")
    @classmethod
    def _normalize_fields(cls, value: Any) -> dict[FieldPath, Any]:
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ValueError("fields must be a mapping of field path to value")
        normalized: dict[FieldPath, Any] = {}
        for key, item in value.items():
            path = FieldPath.parse(key)
            if path is None:
                raise ValueError(f"unknown field path '{key}'")
            coerced = coerce_field_value(path, item)
            if coerced is not None:
                normalized[path] = coerced
        return normalized

    @classmethod
    def from_payload(
        cls,
        source_id: str,
        payload: Mapping[str, Any],
        *,
        collected_at: datetime | None = None,
        keep_raw: bool = True,
    ) -> SourceRecord:
        """Build a record from a nested collector payload.

        Unknown keys are ignored; values that do not fit their field are dropped
        and described in ``dropped``.
        """

        flat, _ = flatten_payload(payload)
        fields, dropped = coerce_fields(flat, source_id)
        return cls(
            source_id=source_id,
            collected_at=collected_at or datetime.now(UTC),
            fields=fields,
            dropped=tuple(dropped),
            raw=dict(payload) if keep_raw else None,
        )

    def get(self, path: FieldPath | str) -> Any:
        member = FieldPath.parse(path)
        if member is None:
            return None
        return self.fields.get(member)


class ResolvedField(BaseModel):
    """Result of merging one field path across sources."""

    model_config = ConfigDict(frozen=True)

    value: Any
    contributing_source: str
    agreement: bool = True
    reported_by: tuple[str, ...] = ()


class CanonicalRecord(BaseModel):
    """Merged, conflict-resolved view of one entity."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    fields: dict[FieldPath, ResolvedField] = Field(default_factory=dict)
    sources: tuple[str, ...] = ()
    confidence: int = Field(default=0, ge=0, le=100)
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    missing_required: tuple[FieldPath, ...] = ()

    def has(self, path: FieldPath | str) -> bool:
        member = FieldPath.parse(path)
        return member is not None and member in self.fields

    def value(self, path: FieldPath | str) -> Any:
        """Return the resolved value for ``path`` or ``None`` when absent."""

        member = FieldPath.parse(path)
        if member is None:
            return None
        resolved = self.fields.get(member)
        return resolved.value if resolved is not None else None

    @property
    def conflicts(self) -> tuple[FieldPath, ...]:
        return tuple(path for path, resolved in self.fields.items() if not resolved.agreement)

    def field_values(self) -> dict[str, Any]:
        """Plain ``path -> value`` mapping for downstream consumers."""

        values: dict[str, Any] = {}
        for path, resolved in self.fields.items():
            if path.kind is FieldKind.NEWS:
                values[path.value] = [item.model_dump(mode="json") for item in resolved.value]
            else:
                values[path.value] = resolved.value
        return values


__all__ = [
    "CanonicalRecord",
    "ResolvedField",
    "SourceRecord",
    "coerce_field_value",
    "coerce_fields",
    "flatten_payload",
]
