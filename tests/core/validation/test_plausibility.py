from __future__ import annotations

from tickerlens.core.models.fields import FieldPath
from tickerlens.core.validation.plausibility import check_plausibility


def test_plausible_values_produce_no_issues() -> None:
    values = {
        FieldPath.PRICE_CURRENT: 2850.0,
        FieldPath.PRICE_VOLUME: 0.0,
        FieldPath.PRICE_CHANGE_PERCENT: -12.0,
        FieldPath.PER: 9.8,
        FieldPath.PBR: 1.1,
        FieldPath.ROE: -5.0,
        FieldPath.RSI: 100.0,
    }

    assert check_plausibility(values) == []


def test_price_and_volume_violations_are_fatal() -> None:
    issues = check_plausibility({FieldPath.PRICE_CURRENT: 0.0, FieldPath.PRICE_VOLUME: -1.0})

    assert [(issue.code, issue.fatal) for issue in issues] == [
        ("NON_POSITIVE_PRICE", True),
        ("NEGATIVE_VOLUME", True),
    ]


def test_range_violations_are_warnings() -> None:
    values = {
        FieldPath.PRICE_CHANGE_PERCENT: 55.0,
        FieldPath.PER: 1200.0,
        FieldPath.PBR: 60.0,
        FieldPath.ROE: -150.0,
        FieldPath.RSI: -1.0,
    }

    issues = check_plausibility(values)

    assert {issue.field for issue in issues} == set(values)
    assert not any(issue.fatal for issue in issues)
    assert issues[0].describe() == "price.changePercent: day-over-day change exceeds 50%"


def test_missing_and_non_numeric_values_are_skipped() -> None:
    assert check_plausibility({FieldPath.COMPANY_NAME: "Toyota"}) == []
    assert check_plausibility({}) == []
