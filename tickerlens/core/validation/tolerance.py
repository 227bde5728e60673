"""Agreement rules used to decide whether two reported values conflict."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from tickerlens.core.models.fields import FieldKind, FieldPath

SourceValue = tuple[str, Any]


@dataclass(frozen=True)
class ToleranceRule:
    """Numeric agreement window; non-numeric values always compare exactly."""

    relative: float = 0.0
    absolute: float = 0.0

    def __post_init__(self) -> None:
        if self.relative < 0 or self.absolute < 0:
            raise ValueError("tolerances must be non-negative")

    def agrees(self, left: Any, right: Any) -> bool:
        if _is_number(left) and _is_number(right):
            window = max(self.absolute, self.relative * max(abs(left), abs(right)))
            return abs(left - right) <= window
        return left == right

    def to_dict(self) -> dict[str, float]:
        return {"relative": self.relative, "absolute": self.absolute}


EXACT = ToleranceRule()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def resolve_tolerance(path: FieldPath, overrides: Mapping[FieldPath, ToleranceRule] | None = None) -> ToleranceRule:
    """Return the configured rule for ``path`` falling back to its declared default."""

    if overrides and path in overrides:
        return overrides[path]
    if path.kind is FieldKind.NUMBER and path.spec.relative_tolerance:
        return ToleranceRule(relative=path.spec.relative_tolerance)
    return EXACT


def group_equivalent(pairs: Sequence[SourceValue], rule: ToleranceRule) -> list[list[SourceValue]]:
    """Partition ``pairs`` into equivalence classes, preserving priority order.

    Each pair joins the first class whose representative (its earliest member)
    agrees with it under ``rule``; otherwise it opens a new class.
    """

    classes: list[list[SourceValue]] = []
    for pair in pairs:
        for members in classes:
            if rule.agrees(members[0][1], pair[1]):
                members.append(pair)
                break
        else:
            classes.append([pair])
    return classes


__all__ = ["EXACT", "SourceValue", "ToleranceRule", "group_equivalent", "resolve_tolerance"]
