"""Range checks flagging implausible values in a merged record."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from tickerlens.core.models.fields import FieldPath


@dataclass(slots=True, frozen=True)
class PlausibilityIssue:
    """Represents a single out-of-range value."""

    field: FieldPath
    code: str
    message: str
    fatal: bool = False

    def describe(self) -> str:
        return f"{self.field.value}: {self.message}"


@dataclass(slots=True, frozen=True)
class _RangeCheck:
    field: FieldPath
    code: str
    message: str
    violates: Callable[[float], bool]
    fatal: bool = False


_CHECKS: tuple[_RangeCheck, ...] = (
    _RangeCheck(FieldPath.PRICE_CURRENT, "NON_POSITIVE_PRICE", "price must be positive", lambda v: v <= 0, fatal=True),
    _RangeCheck(FieldPath.PRICE_VOLUME, "NEGATIVE_VOLUME", "volume must not be negative", lambda v: v < 0, fatal=True),
    _RangeCheck(
        FieldPath.PRICE_CHANGE_PERCENT,
        "EXTREME_CHANGE",
        "day-over-day change exceeds 50%",
        lambda v: abs(v) > 50,
    ),
    _RangeCheck(FieldPath.PER, "PER_OUT_OF_RANGE", "PER outside 0..1000", lambda v: v < 0 or v > 1000),
    _RangeCheck(FieldPath.PBR, "PBR_OUT_OF_RANGE", "PBR outside 0..50", lambda v: v < 0 or v > 50),
    _RangeCheck(FieldPath.ROE, "ROE_OUT_OF_RANGE", "ROE outside -100..100", lambda v: v < -100 or v > 100),
    _RangeCheck(FieldPath.RSI, "RSI_OUT_OF_RANGE", "RSI outside 0..100", lambda v: v < 0 or v > 100),
)


def check_plausibility(values: Mapping[FieldPath, Any]) -> list[PlausibilityIssue]:
    """Return the range violations found in ``values``; absent fields are skipped."""

    issues: list[PlausibilityIssue] = []
    for check in _CHECKS:
        value = values.get(check.field)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            continue
        if check.violates(value):
            issues.append(PlausibilityIssue(check.field, check.code, check.message, check.fatal))
    return issues


__all__ = ["PlausibilityIssue", "check_plausibility"]
