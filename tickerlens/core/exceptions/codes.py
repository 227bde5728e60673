"""Standard error codes shared across tickerlens layers."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Machine readable error codes attached to :class:`TickerLensError`."""

    GENERAL_ERROR = "GENERAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    EXTRACTION_ERROR = "EXTRACTION_ERROR"
    COLLECTION_ERROR = "COLLECTION_ERROR"
    COLLECTOR_TIMEOUT = "COLLECTOR_TIMEOUT"
    AGGREGATION_ERROR = "AGGREGATION_ERROR"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


__all__ = ["ErrorCode"]
