"""
Response Assembler

Runs one complete aggregation (walk -> normalize -> aggregate -> views) and
merges the views and totals into the single JSON-serializable object served
to dashboards. Field names and nesting here are consumed through JSON
queries, so renaming or moving any key is a breaking change.

Runs are all-or-nothing: any error aborts the run and nothing partial is
returned.
"""

import asyncio
from typing import Any, Dict, Optional

import structlog

from src.analytics.aggregator import AccumulatorBundle, Aggregator
from src.analytics import views
from src.config.definitions import DEFAULT_DEFINITIONS, DashboardDefinitions
from src.errors import AggregationTimeoutError
from src.ingestion.pagination import DEFAULT_MAX_PAGES, PageSource, PaginationWalker
from src.transformation.normalizer import Clock, utc_now

logger = structlog.get_logger(__name__)


def assemble_response(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions = DEFAULT_DEFINITIONS,
) -> Dict[str, Any]:
    """
    Build the dashboard payload from a finished bundle.

    Args:
        bundle: Accumulator state after the last record
        definitions: Static definitions used during the run

    Returns:
        Dashboard payload dict
    """
    channel_distribution = views.build_channel_distribution(bundle, definitions)
    agrid_columns, agrid_rows = views.build_table(bundle, definitions)

    average_rating = None
    if bundle.rating_count:
        average_rating = views.round_half_up(bundle.rating_sum / bundle.rating_count)

    return {
        "total_products": bundle.product_count,
        "reported_total_products": bundle.reported_total,
        "total_quantity": bundle.total_quantity,
        "total_sold_quantity": bundle.total_sold,
        "total_views": bundle.total_views,
        "total_sales_value": views.round_half_up(bundle.sales_value, 0),
        "total_inventory_value": views.round_half_up(bundle.inventory_value, 0),
        "average_rating": average_rating,
        "currency": bundle.currency or definitions.default_currency,
        "pages_fetched": bundle.pages_fetched,
        "truncated": bundle.truncated,
        "inventory_bands": views.build_inventory_bands(bundle, definitions),
        "status_breakdown": views.build_status_breakdown(bundle, definitions),
        "channel_distribution": channel_distribution,
        "channel_summary": views.build_channel_summary(channel_distribution),
        "order_heatmap": views.build_order_heatmap(bundle, definitions),
        "sales_funnel": views.build_sales_funnel(bundle),
        "daily_sales": views.build_daily_sales(bundle),
        "top_products": views.build_top_products(bundle, definitions),
        "summary_cards": views.build_summary_cards(bundle),
        "agrid_columns": agrid_columns,
        "agrid_rows": agrid_rows,
    }


async def _aggregate(
    source: PageSource,
    definitions: DashboardDefinitions,
    max_pages: int,
    now: Clock,
) -> Dict[str, Any]:
    walker = PaginationWalker(source, max_pages=max_pages)
    aggregator = Aggregator(definitions, now=now)
    bundle = await aggregator.consume(walker)

    logger.info(
        "Aggregation completed",
        products=bundle.product_count,
        reported_total=bundle.reported_total,
        pages=bundle.pages_fetched,
        truncated=bundle.truncated,
    )
    return assemble_response(bundle, definitions)


async def run_aggregation(
    source: PageSource,
    definitions: DashboardDefinitions = DEFAULT_DEFINITIONS,
    max_pages: int = DEFAULT_MAX_PAGES,
    now: Clock = utc_now,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Run one full aggregation against a page source.

    A fresh walker and accumulator bundle are created per call. Cancellation
    or timeout stops further page fetches and discards the partial bundle.

    Raises:
        UpstreamFetchError: A page request failed
        AggregationTimeoutError: ``timeout`` elapsed before completion
    """
    run = _aggregate(source, definitions, max_pages, now)
    if timeout is None:
        return await run

    try:
        return await asyncio.wait_for(run, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error("Aggregation timed out", timeout_seconds=timeout)
        raise AggregationTimeoutError(timeout)
