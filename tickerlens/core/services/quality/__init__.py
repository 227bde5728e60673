"""Quality assessment of canonical records."""

from tickerlens.core.services.quality.assessor import (
    FUNDAMENTAL_FIELDS,
    PRICE_FIELDS,
    TECHNICAL_FIELDS,
    QualityAssessor,
    assess_quality,
)
from tickerlens.core.services.quality.report import format_quality_report

__all__ = [
    "FUNDAMENTAL_FIELDS",
    "PRICE_FIELDS",
    "TECHNICAL_FIELDS",
    "QualityAssessor",
    "assess_quality",
    "format_quality_report",
]
