"""Completeness scoring and the adequacy gate for canonical records."""

from __future__ import annotations

from collections.abc import Mapping
from math import floor
from typing import Any

from tickerlens.core.config.settings import QualityPolicy
from tickerlens.core.models.fields import FieldPath
from tickerlens.core.models.quality import QualityDetails, QualityReport
from tickerlens.core.models.records import CanonicalRecord, ResolvedField

PRICE_FIELDS = (FieldPath.PRICE_CURRENT, FieldPath.PRICE_CHANGE_PERCENT, FieldPath.PRICE_VOLUME)
TECHNICAL_FIELDS = (
    FieldPath.MA25,
    FieldPath.MA75,
    FieldPath.MA200,
    FieldPath.RSI,
    FieldPath.MACD_VALUE,
)
FUNDAMENTAL_FIELDS = (FieldPath.PER, FieldPath.PBR, FieldPath.ROE, FieldPath.DIVIDEND_YIELD)

RecordLike = CanonicalRecord | Mapping[Any, Any]


def _lookup(record: RecordLike, path: FieldPath) -> Any:
    if isinstance(record, CanonicalRecord):
        return record.value(path)
    value = record.get(path)
    if value is None:
        value = record.get(path.value)
    if isinstance(value, ResolvedField):
        return value.value
    return value


def _is_present(value: Any) -> bool:
    # Zero is a reported value; only absence, blanks and empty lists count as missing.
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


class QualityAssessor:
    """Score a canonical record's fitness for downstream analysis."""

    def __init__(self, policy: QualityPolicy | None = None) -> None:
        self._policy = policy or QualityPolicy()

    @property
    def policy(self) -> QualityPolicy:
        return self._policy

    def assess(self, record: RecordLike) -> QualityReport:
        """Compute the quality report; tolerates any combination of absent fields."""

        policy = self._policy
        available: list[str] = []
        missing: list[str] = []

        def present(path: FieldPath) -> bool:
            found = _is_present(_lookup(record, path))
            (available if found else missing).append(path.value)
            return found

        price_hits = [present(path) for path in PRICE_FIELDS]
        price_complete = all(price_hits)
        technical_hits = sum(present(path) for path in TECHNICAL_FIELDS)
        fundamental_hits = sum(present(path) for path in FUNDAMENTAL_FIELDS)
        news_available = present(FieldPath.NEWS)

        technical_rate = technical_hits / len(TECHNICAL_FIELDS) * 100
        fundamental_rate = fundamental_hits / len(FUNDAMENTAL_FIELDS) * 100

        score = 0.0
        if price_complete:
            score += policy.price_weight
        elif price_hits[0]:
            score += policy.price_weight * policy.partial_price_ratio
        score += technical_rate / 100 * policy.technical_weight
        score += fundamental_rate / 100 * policy.fundamental_weight
        if news_available:
            score += policy.news_weight

        is_adequate = price_complete and (
            technical_rate >= policy.technical_adequacy_threshold
            or fundamental_rate >= policy.fundamental_adequacy_threshold
        )

        return QualityReport(
            score=min(100, _round_half_up(score)),
            is_adequate=is_adequate,
            missing_fields=tuple(missing),
            available_fields=tuple(available),
            technical_data_available=technical_rate >= policy.availability_threshold,
            fundamental_data_available=fundamental_rate >= policy.availability_threshold,
            details=QualityDetails(
                price_complete=price_complete,
                technical_rate=_round_half_up(technical_rate),
                fundamental_rate=_round_half_up(fundamental_rate),
                news_available=news_available,
            ),
        )


def assess_quality(record: RecordLike, policy: QualityPolicy | None = None) -> QualityReport:
    """Convenience wrapper around :meth:`QualityAssessor.assess`."""

    return QualityAssessor(policy).assess(record)


__all__ = [
    "FUNDAMENTAL_FIELDS",
    "PRICE_FIELDS",
    "QualityAssessor",
    "RecordLike",
    "TECHNICAL_FIELDS",
    "assess_quality",
]
