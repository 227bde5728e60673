"""
Aggregation and quality assessment routes.
"""

import dataclasses
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Request
from loguru import logger

from tickerlens.core.config import TickerLensConfig
from tickerlens.core.models.records import flatten_payload
from tickerlens.core.monitoring import get_metrics_collector
from tickerlens.core.services.aggregation import Aggregator
from tickerlens.core.services.pipeline import AnalysisDataService
from tickerlens.core.services.quality import QualityAssessor, format_quality_report

from ..models import AggregateRequest, APIResponse, QualityRequest

router = APIRouter()


def _config(request: Request) -> TickerLensConfig:
    return request.app.state.config


@router.post("/aggregate", response_model=APIResponse)
async def aggregate_records(payload: AggregateRequest, request: Request) -> APIResponse:
    """
    Merge source records into one canonical record and grade its quality.

    Partial or conflicting data is not an error: the envelope succeeds and the
    aggregation outcome carries its own ``success`` flag, errors and warnings.
    """
    config = _config(request)
    changes: dict[str, Any] = {}
    if payload.source_priority is not None:
        changes["source_priority"] = tuple(payload.source_priority)
    if payload.max_age_hours is not None:
        changes["max_age"] = timedelta(hours=payload.max_age_hours)
    aggregation_config = dataclasses.replace(config.aggregation, **changes) if changes else config.aggregation

    service = AnalysisDataService(
        Aggregator(aggregation_config),
        QualityAssessor(config.quality),
        metrics=get_metrics_collector(),
    )
    prepared = service.prepare(payload.entity_id, payload.records, as_of=payload.as_of)

    logger.info(
        "Aggregation request served",
        extra={
            "endpoint": "/analysis/aggregate",
            "entity_id": payload.entity_id,
            "records": len(payload.records),
            "confidence": prepared.aggregation.confidence,
        },
    )
    return APIResponse(
        success=True,
        data=prepared.to_payload(),
        message="aggregation complete" if prepared.aggregation.success else "no required field resolved",
    )


@router.post("/quality", response_model=APIResponse)
async def assess_quality(payload: QualityRequest, request: Request) -> APIResponse:
    """
    Score a canonical field mapping and render the text report.
    """
    values, unknown = flatten_payload(payload.fields)
    report = QualityAssessor(_config(request).quality).assess(values)
    get_metrics_collector().observe_quality(report.score)

    return APIResponse(
        success=True,
        data={
            "report": report.model_dump(mode="json"),
            "text": format_quality_report(report, max_missing=payload.max_missing),
            "ignored_fields": unknown,
        },
        message="quality assessed",
    )
