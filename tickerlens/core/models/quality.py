"""Quality assessment result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class QualityDetails(BaseModel):
    """Per-category coverage figures."""

    model_config = ConfigDict(frozen=True)

    price_complete: bool
    technical_rate: float = Field(ge=0, le=100)
    fundamental_rate: float = Field(ge=0, le=100)
    news_available: bool


class QualityReport(BaseModel):
    """Completeness score and adequacy verdict for one canonical record."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    is_adequate: bool
    missing_fields: tuple[str, ...] = ()
    available_fields: tuple[str, ...] = ()
    technical_data_available: bool = False
    fundamental_data_available: bool = False
    details: QualityDetails


__all__ = ["QualityDetails", "QualityReport"]
