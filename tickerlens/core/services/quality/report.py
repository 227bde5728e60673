"""Human readable rendering of quality reports."""

from __future__ import annotations

from tickerlens.core.models.quality import QualityReport

DEFAULT_MAX_MISSING = 10


def _mark(flag: bool, yes: str, no: str) -> str:
    return f"[OK] {yes}" if flag else f"[!!] {no}"


def format_quality_report(report: QualityReport, *, max_missing: int = DEFAULT_MAX_MISSING) -> str:
    """Render ``report`` as a field-by-field diagnostic block."""

    details = report.details
    lines = [
        "[Data quality]",
        f"Overall score: {report.score}/100",
        f"Analysis: {_mark(report.is_adequate, 'adequate', 'insufficient data')}",
        "",
        "[Details]",
        f"Price data: {_mark(details.price_complete, 'complete', 'incomplete')}",
        f"Technical indicators: {details.technical_rate:.0f}% available",
        f"Fundamental metrics: {details.fundamental_rate:.0f}% available",
        f"News: {_mark(details.news_available, 'available', 'none')}",
    ]

    if report.missing_fields:
        lines.append("")
        lines.append("[Missing fields]")
        shown = report.missing_fields[: max(max_missing, 0)]
        lines.extend(f"- {field}" for field in shown)
        remaining = len(report.missing_fields) - len(shown)
        if remaining > 0:
            lines.append(f"... and {remaining} more")

    return "\n".join(lines) + "\n"


__all__ = ["DEFAULT_MAX_MISSING", "format_quality_report"]
