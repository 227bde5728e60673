"""tickerlens core exception classes."""

from typing import Any

from tickerlens.core.exceptions.codes import ErrorCode


class TickerLensError(Exception):
    """Root of the tickerlens exception hierarchy."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        """Create the exception.

        Args:
            message: human readable message
            error_code: machine readable code, usually an :class:`ErrorCode` value
            details: extra structured context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_payload(self) -> dict[str, Any]:
        """Return a serializable payload representing the error."""

        return {"code": self.error_code, "message": self.message, "details": dict(self.details)}


class DataValidationError(TickerLensError):
    """Raised when a caller supplies structurally invalid data."""

    def __init__(
        self,
        message: str,
        validation_errors: dict[str, Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if validation_errors:
            super_details["validation_errors"] = validation_errors
        super().__init__(message, ErrorCode.VALIDATION_ERROR.value, super_details)
        self.validation_errors = validation_errors or {}


class ConfigurationError(TickerLensError):
    """Raised when aggregation or quality policy configuration is invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if setting:
            super_details["setting"] = setting
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR.value, super_details)
        self.setting = setting


class ExtractionError(TickerLensError):
    """Raised when structured data cannot be extracted from free text."""

    def __init__(
        self,
        message: str,
        preview: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        if preview is not None:
            super_details["preview"] = preview
        super().__init__(message, ErrorCode.EXTRACTION_ERROR.value, super_details)
        self.preview = preview


class CollectionError(TickerLensError):
    """Raised when a collector fails to produce a source record."""

    def __init__(
        self,
        message: str,
        source_id: str,
        error_code: str = ErrorCode.COLLECTION_ERROR.value,
        details: dict[str, Any] | None = None,
    ):
        super_details = dict(details or {})
        super_details["source_id"] = source_id
        super().__init__(message, error_code, super_details)
        self.source_id = source_id
