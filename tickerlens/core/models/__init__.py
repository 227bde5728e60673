"""Domain models."""

from tickerlens.core.models.fields import (
    FIELD_SPECS,
    FieldCategory,
    FieldKind,
    FieldPath,
    FieldSpec,
    NewsItem,
    paths_in,
)
from tickerlens.core.models.quality import QualityDetails, QualityReport
from tickerlens.core.models.records import (
    CanonicalRecord,
    ResolvedField,
    SourceRecord,
    coerce_field_value,
    coerce_fields,
    flatten_payload,
)

__all__ = [
    "FIELD_SPECS",
    "CanonicalRecord",
    "FieldCategory",
    "FieldKind",
    "FieldPath",
    "FieldSpec",
    "NewsItem",
    "QualityDetails",
    "QualityReport",
    "ResolvedField",
    "SourceRecord",
    "coerce_field_value",
    "coerce_fields",
    "flatten_payload",
    "paths_in",
]
