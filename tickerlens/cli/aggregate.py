from __future__ import annotations

import dataclasses
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Mapping, Sequence, TextIO

import typer

from tickerlens.core.config import TickerLensConfig
from tickerlens.core.exceptions import ConfigurationError, ErrorCode, TickerLensError
from tickerlens.core.models.fields import FieldKind
from tickerlens.core.models.quality import QualityReport
from tickerlens.core.services.aggregation import Aggregator
from tickerlens.core.services.pipeline import AnalysisDataService, PreparedData
from tickerlens.core.services.quality import QualityAssessor, format_quality_report

from .constants import INSUFFICIENT_DATA_EXIT_CODE, SYSTEM_EXIT_CODE, VALIDATION_EXIT_CODE
from .formatters import OutputFormatter
from .utils import emit_error, load_json_file, load_settings, prepare_output


aggregate_app = typer.Typer(help="Multi-source aggregation.")

SUMMARY_COLUMNS = ["metric", "value"]
FIELD_COLUMNS = ["field", "value", "source", "agreement", "reported_by"]
MESSAGE_COLUMNS = ["severity", "message"]


def register(app: typer.Typer) -> None:
    """Register aggregation commands on the provided application."""

    app.add_typer(aggregate_app, name="aggregate", help="Merge source records into a canonical record")


def get_analysis_service(config: TickerLensConfig) -> AnalysisDataService:
    """Factory hook for obtaining the analysis data service."""

    return AnalysisDataService(Aggregator(config.aggregation), QualityAssessor(config.quality))


@aggregate_app.command("run")
def run_command(
    ctx: typer.Context,
    entity: str = typer.Argument(..., metavar="ENTITY", help="Entity (ticker) identifier."),
    files: list[Path] = typer.Argument(..., metavar="FILE...", help="JSON files holding source records."),
    priority: str | None = typer.Option(
        None,
        "--priority",
        help="Comma separated source ids, highest priority first.",
    ),
    max_age_hours: float | None = typer.Option(None, "--max-age-hours", help="Staleness threshold in hours."),
    as_of: str | None = typer.Option(None, "--as-of", help="Reference time for staleness (ISO 8601)."),
    quality: bool = typer.Option(False, "--quality", help="Assess quality and require an adequate record."),
    config_path: Path | None = typer.Option(None, "--config", help="Configuration file to load."),
) -> None:
    """Aggregate the source records in FILE... for ENTITY."""

    formatter, stream, stack, _ = prepare_output(ctx)

    try:
        if not entity.strip():
            emit_error("Entity identifier must not be blank.", "ENTITY_MISSING")
            raise typer.Exit(code=VALIDATION_EXIT_CODE)

        reference = _parse_as_of(as_of) if as_of else None
        config = _apply_overrides(load_settings(config_path), priority, max_age_hours)
        records = _load_records(files)

        try:
            service = get_analysis_service(config)
            prepared = service.prepare(entity, records, as_of=reference)
        except TickerLensError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from error
        except Exception as error:  # pragma: no cover
            emit_error(str(error), ErrorCode.UNEXPECTED_ERROR.value)
            raise typer.Exit(code=SYSTEM_EXIT_CODE) from error

        formatter.render(_build_summary_rows(prepared), stream=stream, columns=SUMMARY_COLUMNS, title="Summary")
        formatter.render(_build_field_rows(prepared), stream=stream, columns=FIELD_COLUMNS, title="Fields")
        messages = _build_message_rows(prepared)
        if messages:
            formatter.render(messages, stream=stream, columns=MESSAGE_COLUMNS, title="Messages")
        if quality:
            render_quality(formatter, stream, prepared.quality)
    finally:
        stack.close()

    if not prepared.aggregation.success:
        emit_error(
            f"No required field could be resolved for {entity}.",
            ErrorCode.INSUFFICIENT_DATA.value,
            details={"missing_required": [path.value for path in prepared.aggregation.data.missing_required]},
        )
        raise typer.Exit(code=INSUFFICIENT_DATA_EXIT_CODE)
    if quality and not prepared.quality.is_adequate:
        emit_error(
            f"Data for {entity} is not adequate for analysis (score {prepared.quality.score}).",
            ErrorCode.INSUFFICIENT_DATA.value,
        )
        raise typer.Exit(code=INSUFFICIENT_DATA_EXIT_CODE)


def render_quality(formatter: OutputFormatter, stream: TextIO, report: QualityReport) -> None:
    """Render quality metrics followed by the human readable report."""

    rows = [
        {"metric": "score", "value": report.score},
        {"metric": "adequate", "value": report.is_adequate},
        {"metric": "price_complete", "value": report.details.price_complete},
        {"metric": "technical_rate", "value": round(report.details.technical_rate, 1)},
        {"metric": "fundamental_rate", "value": round(report.details.fundamental_rate, 1)},
        {"metric": "news_available", "value": report.details.news_available},
    ]
    formatter.render(rows, stream=stream, columns=SUMMARY_COLUMNS, title="Quality")
    formatter.render_text(format_quality_report(report), stream=stream, kind="quality_report")


def _parse_as_of(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        emit_error(f"Invalid --as-of '{value}'. Expected ISO 8601.", "INVALID_AS_OF", details={"as_of": value})
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _apply_overrides(config: TickerLensConfig, priority: str | None, max_age_hours: float | None) -> TickerLensConfig:
    changes: dict[str, Any] = {}
    if priority:
        changes["source_priority"] = tuple(item.strip() for item in priority.split(",") if item.strip())
    if max_age_hours is not None:
        if max_age_hours <= 0:
            emit_error("--max-age-hours must be positive.", "INVALID_MAX_AGE", details={"max_age_hours": max_age_hours})
            raise typer.Exit(code=VALIDATION_EXIT_CODE)
        changes["max_age"] = timedelta(hours=max_age_hours)
    if not changes:
        return config
    try:
        aggregation = dataclasses.replace(config.aggregation, **changes)
    except ConfigurationError as exc:
        emit_error(exc.message, exc.error_code, details=exc.details)
        raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc
    return dataclasses.replace(config, aggregation=aggregation)


def _load_records(files: Sequence[Path]) -> list[Any]:
    records: list[Any] = []
    for path in files:
        payload = load_json_file(path)
        items = payload if isinstance(payload, list) else [payload]
        for item in items:
            if isinstance(item, Mapping) and not (item.get("source_id") or item.get("sourceId")):
                item = {**item, "source_id": path.stem}
            records.append(item)
    return records


def _build_summary_rows(prepared: PreparedData) -> list[Mapping[str, object]]:
    result = prepared.aggregation
    data = result.data
    return [
        {"metric": "entity", "value": data.entity_id},
        {"metric": "success", "value": result.success},
        {"metric": "confidence", "value": result.confidence},
        {"metric": "sources", "value": list(result.sources)},
        {"metric": "fields", "value": len(data.fields)},
        {"metric": "conflicts", "value": len(data.conflicts)},
        {"metric": "missing_required", "value": [path.value for path in data.missing_required]},
    ]


def _build_field_rows(prepared: PreparedData) -> list[Mapping[str, object]]:
    rows: list[Mapping[str, object]] = []
    for path, resolved in prepared.aggregation.data.fields.items():
        value: object = resolved.value
        if path.kind is FieldKind.NEWS:
            value = [item.title for item in resolved.value]
        rows.append(
            {
                "field": path.value,
                "value": value,
                "source": resolved.contributing_source,
                "agreement": resolved.agreement,
                "reported_by": list(resolved.reported_by),
            }
        )
    return rows


def _build_message_rows(prepared: PreparedData) -> list[Mapping[str, object]]:
    result = prepared.aggregation
    rows: list[Mapping[str, object]] = [{"severity": "error", "message": message} for message in result.errors]
    rows.extend({"severity": "warning", "message": message} for message in result.warnings)
    return rows


__all__ = [
    "FIELD_COLUMNS",
    "MESSAGE_COLUMNS",
    "SUMMARY_COLUMNS",
    "aggregate_app",
    "get_analysis_service",
    "register",
    "render_quality",
    "run_command",
]
