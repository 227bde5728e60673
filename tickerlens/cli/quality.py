from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import typer

from tickerlens.core.config import QualityPolicy
from tickerlens.core.models.records import flatten_payload
from tickerlens.core.services.quality import QualityAssessor

from .aggregate import render_quality
from .constants import INSUFFICIENT_DATA_EXIT_CODE, VALIDATION_EXIT_CODE
from .utils import emit_error, load_json_file, load_settings, prepare_output


quality_app = typer.Typer(help="Data quality assessment.")


def register(app: typer.Typer) -> None:
    """Register quality commands on the provided application."""

    app.add_typer(quality_app, name="quality", help="Assess canonical data quality")


def get_quality_assessor(policy: QualityPolicy) -> QualityAssessor:
    """Factory hook for obtaining the quality assessor."""

    return QualityAssessor(policy)


@quality_app.command("assess")
def assess_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., metavar="FILE", help="JSON file holding a canonical field mapping."),
    strict: bool = typer.Option(False, "--strict", help="Exit non-zero when the data is not adequate."),
    config_path: Path | None = typer.Option(None, "--config", help="Configuration file to load."),
) -> None:
    """Score the completeness of the field mapping in FILE."""

    formatter, stream, stack, _ = prepare_output(ctx)
    try:
        payload = load_json_file(file)
        if not isinstance(payload, Mapping):
            emit_error(
                f"Expected a JSON object in '{file}', got {type(payload).__name__}.",
                "INVALID_QUALITY_INPUT",
                details={"path": file},
            )
            raise typer.Exit(code=VALIDATION_EXIT_CODE)

        values = _extract_values(payload)
        report = get_quality_assessor(load_settings(config_path).quality).assess(values)
        render_quality(formatter, stream, report)
    finally:
        stack.close()

    if strict and not report.is_adequate:
        emit_error(f"Data is not adequate for analysis (score {report.score}).", "INSUFFICIENT_DATA")
        raise typer.Exit(code=INSUFFICIENT_DATA_EXIT_CODE)


def _extract_values(payload: Mapping[str, Any]) -> dict[str, Any]:
    # Accept an aggregation payload ({"data": {"fields": {...}}}) as well as a plain mapping.
    data = payload.get("data")
    if isinstance(data, Mapping) and isinstance(data.get("fields"), Mapping):
        return {
            path: resolved.get("value") if isinstance(resolved, Mapping) else resolved
            for path, resolved in data["fields"].items()
        }
    flat, _ = flatten_payload(payload)
    return flat


__all__ = ["assess_command", "get_quality_assessor", "quality_app", "register"]
