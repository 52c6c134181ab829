"""
Dashboard View Builders

Pure functions turning a finished ``AccumulatorBundle`` into display-ready
views. None of them mutate the bundle, and none of the outputs reference
raw or normalized records.

All rounding is half-up so figures match what the dashboard widgets show.
"""

from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional, Tuple
import hashlib
import math

from src.analytics.aggregator import AccumulatorBundle, RetainedRecord
from src.config.definitions import DashboardDefinitions

PREVIOUS_PERIOD_FACTOR = 0.9
VIEWS_PER_PRODUCT_ESTIMATE = 12
ENGAGEMENT_RATE = 0.3


def round_half_up(value: float, digits: int = 2):
    """
    Round half away from zero; ``digits=0`` returns an int.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    exact = Decimal(str(value))
    quantum = Decimal(1).scaleb(-digits)
    with localcontext() as ctx:
        # Room for every integer digit of large magnitudes
        ctx.prec = max(ctx.prec, exact.adjusted() + digits + 2)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


def percentage(part: float, whole: float) -> float:
    """part / whole as a 2-decimal percentage, 0 when whole is 0"""
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def percent_change(current: float, previous: float) -> float:
    if not previous:
        return 0
    return round_half_up((current - previous) / previous * 100)


def stable_palette_color(label: str, palette: Tuple[str, ...]) -> str:
    """Pick a palette color from a SHA-1 of the label (same label, same color)"""
    digest = hashlib.sha1(label.encode("utf-8")).hexdigest()
    return palette[int(digest, 16) % len(palette)]


def build_status_breakdown(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions,
) -> List[Dict[str, Any]]:
    """One entry per status in first-seen order, colors cycling the palette"""
    palette = definitions.status_palette
    return [
        {
            "name": status,
            "value": count,
            "percentage": percentage(count, bundle.product_count),
            "color": palette[index % len(palette)],
        }
        for index, (status, count) in enumerate(bundle.status_counts.items())
    ]


def build_channel_distribution(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions,
) -> List[Dict[str, Any]]:
    """
    One entry per channel in first-seen order.

    Percentages are of channel-tag occurrences, not products, since one
    product can be listed on several channels.
    """
    occurrences = bundle.channel_occurrences
    entries = []
    for channel, count in bundle.channel_counts.items():
        known = definitions.channel(channel)
        entries.append({
            "name": channel,
            "label": known.label if known else channel,
            "value": count,
            "percentage": percentage(count, occurrences),
            "color": known.color if known else stable_palette_color(channel, definitions.channel_palette),
        })
    return entries


def build_channel_summary(distribution: List[Dict[str, Any]]) -> Dict[str, float]:
    if not distribution:
        return {"value": 0, "change": 0, "average": 0}

    first = distribution[0]["percentage"]
    change = round_half_up(first - distribution[1]["percentage"]) if len(distribution) > 1 else 0
    average = round_half_up(sum(entry["percentage"] for entry in distribution) / len(distribution))
    return {"value": first, "change": change, "average": average}


def build_inventory_bands(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions,
) -> List[Dict[str, Any]]:
    """Available/sold split per price bucket, as ratios and raw counts"""
    bands = []
    for bucket, stats in zip(definitions.price_buckets, bundle.bucket_stats):
        bands.append({
            "label": bucket.label,
            "start": bucket.start,
            "end": bucket.end,
            "ratio": [percentage(stats.available, stats.total), percentage(stats.sold, stats.total)],
            "counts": [stats.available, stats.sold],
        })
    return bands


def build_order_heatmap(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions,
) -> List[Dict[str, Any]]:
    """Touched calendar cells sorted by (day index Sun=0..Sat=6, hour)"""
    return [
        {
            "day": definitions.day_labels[day_index],
            "day_index": day_index,
            "hour": hour,
            "value": count,
        }
        for (day_index, hour), count in sorted(bundle.calendar_cells.items())
    ]


def build_sales_funnel(bundle: AccumulatorBundle) -> Dict[str, Any]:
    """
    Synthetic Views -> Engaged -> Purchased funnel.

    The Views stage is never zero so the rates below are always defined.
    """
    views = bundle.total_views or bundle.product_count * VIEWS_PER_PRODUCT_ESTIMATE or 1
    engaged = max(bundle.total_sold * 2, round_half_up(views * ENGAGEMENT_RATE, 0))
    purchased = bundle.total_sold

    return {
        "stages": [
            {"name": "Views", "value": views, "percentage": 100},
            {"name": "Engaged", "value": engaged, "percentage": percentage(engaged, views)},
            {"name": "Purchased", "value": purchased, "percentage": percentage(purchased, views)},
        ],
        "funnel_rate": percentage(purchased, views),
    }


def build_daily_sales(bundle: AccumulatorBundle) -> Dict[str, Any]:
    series = [
        {"date": day, "revenue": round_half_up(revenue)}
        for day, revenue in sorted(bundle.daily_revenue.items())
    ]
    total = sum(bundle.daily_revenue.values())
    previous = total * PREVIOUS_PERIOD_FACTOR
    average = total / len(bundle.daily_revenue) if bundle.daily_revenue else 0

    return {
        "series": series,
        "summary": {
            "total": round_half_up(total),
            "previous": round_half_up(previous),
            "change": percent_change(total, previous),
            "average": round_half_up(average),
        },
    }


def build_top_products(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions,
) -> List[Dict[str, Any]]:
    """Best sellers by sold quantity with their share of all units sold"""
    denominator = max(bundle.total_sold, 1)
    ranked = sorted(bundle.retained, key=lambda record: record.sold_quantity, reverse=True)
    return [
        {
            "id": record.id,
            "name": record.name,
            "sku": record.sku,
            "sold_quantity": record.sold_quantity,
            "revenue": round_half_up(record.revenue),
            "percentage": round_half_up(record.sold_quantity / denominator * 100),
        }
        for record in ranked[:definitions.top_products_limit]
    ]


SUMMARY_CARD_FIELDS = (
    ("total_products", "Products", "product_count"),
    ("total_quantity", "Quantity in Stock", "total_quantity"),
    ("total_sold_quantity", "Units Sold", "total_sold"),
    ("total_views", "Product Views", "total_views"),
)


def build_summary_cards(bundle: AccumulatorBundle) -> List[Dict[str, Any]]:
    cards = []
    for key, title, attribute in SUMMARY_CARD_FIELDS:
        current = getattr(bundle, attribute)
        previous = round_half_up(current * PREVIOUS_PERIOD_FACTOR, 0)
        cards.append({
            "key": key,
            "title": title,
            "current": current,
            "previous": previous,
            "change": percent_change(current, previous),
        })
    return cards


TABLE_COLUMNS = [
    {"field": "sku", "headerName": "SKU", "type": "text"},
    {"field": "price", "headerName": "Price", "type": "currency"},
    {"field": "quantity", "headerName": "Quantity", "type": "number"},
    {"field": "sold", "headerName": "Sold", "type": "number"},
    {"field": "status", "headerName": "Status", "type": "status"},
    {"field": "views", "headerName": "Views", "type": "number"},
]


def _stock_tone(quantity: Optional[float], threshold: int) -> str:
    if quantity is None:
        return "unknown"
    if quantity == 0:
        return "danger"
    if quantity < threshold:
        return "warning"
    return "success"


def _table_row(record: RetainedRecord, definitions: DashboardDefinitions) -> Dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "sku": {"value": record.sku or None},
        "price": {"value": record.price_amount, "unit": record.price_currency},
        "quantity": {
            "value": record.quantity,
            "unit": "pcs",
            "status": _stock_tone(record.quantity, definitions.low_stock_threshold),
        },
        "sold": {"value": record.sold_quantity, "unit": "pcs"},
        "status": {
            "value": record.status,
            "status": definitions.status_tones.get(record.status, "neutral"),
        },
        "views": {"value": record.views},
    }


def build_table(
    bundle: AccumulatorBundle,
    definitions: DashboardDefinitions,
) -> Tuple[List[Dict[str, str]], List[Dict[str, Any]]]:
    """Fixed column schema plus the first retained records as typed cells"""
    rows = [_table_row(record, definitions) for record in bundle.retained[:definitions.table_row_limit]]
    return [dict(column) for column in TABLE_COLUMNS], rows
