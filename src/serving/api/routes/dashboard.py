"""
Dashboard Endpoint

Each call triggers one full aggregation over the product catalog and returns
the assembled payload. Nothing is cached between calls.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from src.analytics.assembler import run_aggregation
from src.config import DashboardDefinitions, SallaSettings
from src.serving.api.dependencies import (
    SourceOpener,
    get_clock,
    get_definitions,
    get_salla_settings,
    get_source_opener,
)
from src.serving.api.responses import failure_response, success_body
from src.transformation.normalizer import Clock

router = APIRouter()
logger = structlog.get_logger(__name__)

FAILURE_MESSAGE = "Failed to build product insights from Salla API"


@router.get("/")
@router.get("/api/v1/dashboard")
async def get_dashboard(
    settings: SallaSettings = Depends(get_salla_settings),
    open_source: SourceOpener = Depends(get_source_opener),
    definitions: DashboardDefinitions = Depends(get_definitions),
    clock: Clock = Depends(get_clock),
) -> Any:
    """
    Aggregate the whole product catalog into dashboard views.

    Returns ``{success, status, data}``; on failure the uniform failure
    envelope with 500 (configuration or unexpected), 502 (upstream) or
    504 (timeout).
    """
    logger.info("Dashboard aggregation requested")

    try:
        async with open_source(settings) as source:
            data = await run_aggregation(
                source,
                definitions=definitions,
                max_pages=settings.max_pages,
                now=clock,
                timeout=settings.aggregation_timeout,
            )
    except Exception as e:
        return failure_response(e, FAILURE_MESSAGE)

    return success_body(data=data)
