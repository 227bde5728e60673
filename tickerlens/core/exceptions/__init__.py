"""Exception handling module."""

from tickerlens.core.exceptions.base import (
    CollectionError,
    ConfigurationError,
    DataValidationError,
    ExtractionError,
    TickerLensError,
)
from tickerlens.core.exceptions.codes import ErrorCode

__all__ = [
    "TickerLensError",
    "DataValidationError",
    "ConfigurationError",
    "ExtractionError",
    "CollectionError",
    "ErrorCode",
]
