"""
Products Proxy Endpoint

Forwards a single page request to the Salla products endpoint and returns it
with field metadata, positional rows and a page cursor, for widgets that
expect a tabular shape.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request

from src.config import SallaSettings
from src.serving.api.dependencies import SourceOpener, get_salla_settings, get_source_opener
from src.serving.api.responses import failure_response, success_body
from src.transformation.catalog import build_product_page

router = APIRouter()
logger = structlog.get_logger(__name__)

FAILURE_MESSAGE = "Failed to fetch data from Salla API"


@router.get("/products")
@router.get("/api/v1/products")
async def proxy_products(
    request: Request,
    settings: SallaSettings = Depends(get_salla_settings),
    open_source: SourceOpener = Depends(get_source_opener),
) -> Any:
    """
    Fetch one page of products, forwarding every query parameter upstream.
    """
    params = dict(request.query_params)
    logger.info("Product page requested", params=params)

    try:
        async with open_source(settings) as source:
            payload = await source.fetch_json(params=params)
    except Exception as e:
        return failure_response(e, FAILURE_MESSAGE)

    if not isinstance(payload, dict):
        payload = {}

    return success_body(**build_product_page(payload))
