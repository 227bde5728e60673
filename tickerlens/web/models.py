"""
Web API data models.

Request and response envelopes for the FastAPI layer.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(UTC)


class APIResponse(BaseModel):
    """Standard API response envelope."""

    success: bool = Field(..., description="Whether the request succeeded")
    data: Any | None = Field(None, description="Response payload")
    message: str | None = Field(None, description="Human readable message")
    timestamp: datetime = Field(default_factory=_now, description="Response timestamp")
    request_id: str | None = Field(None, description="Request id for tracing")


class ErrorResponse(BaseModel):
    """Error response envelope."""

    success: bool = Field(False, description="Request failed")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(None, description="Structured error details")
    timestamp: datetime = Field(default_factory=_now, description="Error timestamp")
    request_id: str | None = Field(None, description="Request id for tracing")


class AggregateRequest(BaseModel):
    """Source records to merge for one entity."""

    entity_id: str = Field(..., min_length=1, description="Entity (ticker) identifier, e.g. 7203.T")
    records: list[dict[str, Any]] = Field(default_factory=list, description="Source record payloads")
    source_priority: list[str] | None = Field(None, description="Source ids, highest priority first")
    max_age_hours: float | None = Field(None, gt=0, description="Staleness threshold override")
    as_of: datetime | None = Field(None, description="Reference time for staleness checks")


class QualityRequest(BaseModel):
    """Canonical field mapping to assess."""

    fields: dict[str, Any] = Field(default_factory=dict, description="Flat or nested field mapping")
    max_missing: int = Field(10, ge=0, le=100, description="Missing fields listed in the text report")


class HealthStatus(BaseModel):
    """Health check payload."""

    status: str = Field(..., description="System status")
    version: str = Field(..., description="System version")
    uptime: float = Field(..., description="Uptime in seconds")
    timestamp: datetime = Field(default_factory=_now, description="Check timestamp")
