"""Agreement and plausibility rules applied while merging records."""

from tickerlens.core.validation.plausibility import PlausibilityIssue, check_plausibility
from tickerlens.core.validation.tolerance import (
    EXACT,
    ToleranceRule,
    group_equivalent,
    resolve_tolerance,
)

__all__ = [
    "EXACT",
    "PlausibilityIssue",
    "ToleranceRule",
    "check_plausibility",
    "group_equivalent",
    "resolve_tolerance",
]
