"""Tests for the TickerLensError hierarchy."""

from __future__ import annotations

import pytest

from tickerlens.core.exceptions import (
    CollectionError,
    ConfigurationError,
    DataValidationError,
    ErrorCode,
    ExtractionError,
    TickerLensError,
)


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (DataValidationError("bad input"), ErrorCode.VALIDATION_ERROR),
        (ConfigurationError("bad config"), ErrorCode.CONFIGURATION_ERROR),
        (ExtractionError("no json"), ErrorCode.EXTRACTION_ERROR),
        (CollectionError("down", source_id="yahoo"), ErrorCode.COLLECTION_ERROR),
        (TickerLensError("boom"), ErrorCode.GENERAL_ERROR),
    ],
)
def test_errors_carry_their_code(error: TickerLensError, code: ErrorCode) -> None:
    assert isinstance(error, TickerLensError)
    assert error.error_code == code.value
    assert str(error) == error.message


def test_specific_fields_are_mirrored_into_details() -> None:
    assert ConfigurationError("x", setting="max_age").details == {"setting": "max_age"}
    assert ExtractionError("x", preview="{oops").details == {"preview": "{oops"}
    assert DataValidationError("x", validation_errors={"a": "b"}).details == {"validation_errors": {"a": "b"}}

    error = CollectionError("slow", source_id="kabutan", error_code=ErrorCode.COLLECTOR_TIMEOUT.value)
    assert error.source_id == "kabutan"
    assert error.error_code == "COLLECTOR_TIMEOUT"


def test_to_payload_is_serializable_shape() -> None:
    error = ConfigurationError("weights must total 100", setting="weights")

    assert error.to_payload() == {
        "code": "CONFIGURATION_ERROR",
        "message": "weights must total 100",
        "details": {"setting": "weights"},
    }


def test_caller_details_are_not_mutated() -> None:
    shared = {"path": "quotes.json"}

    DataValidationError("x", validation_errors={"a": "b"}, details=shared)
    ConfigurationError("x", setting="max_age", details=shared)
    ExtractionError("x", preview="{", details=shared)
    error = CollectionError("x", source_id="yahoo", details=shared)

    assert shared == {"path": "quotes.json"}
    assert error.details == {"path": "quotes.json", "source_id": "yahoo"}
