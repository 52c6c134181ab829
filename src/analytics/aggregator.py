"""
Single-Pass Aggregator

Folds normalized product records into an ``AccumulatorBundle``: running
totals, price-bucket stats, status and channel counts, weekday/hour calendar
cells, daily revenue and a bounded list of retained records for ranking and
tabular views.

Each record contributes to every accumulator exactly once. The pass is
strictly sequential and a bundle belongs to exactly one run.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import structlog

from src.config.definitions import DEFAULT_DEFINITIONS, DashboardDefinitions
from src.ingestion.pagination import PaginationWalker
from src.transformation.normalizer import Clock, NormalizedRecord, normalize_record, utc_now

logger = structlog.get_logger(__name__)


def _finite_sum(total: float, amount: float) -> float:
    """Add ``amount`` unless the result would overflow to infinity"""
    result = total + amount
    if not math.isfinite(result):
        logger.warning("Skipping contribution that overflows a running total", amount=amount)
        return total
    return result


@dataclass
class BucketStats:
    """Units available and sold within one price bucket"""
    available: float = 0
    sold: float = 0

    @property
    def total(self) -> float:
        return self.available + self.sold


@dataclass(frozen=True)
class RetainedRecord:
    """Compact per-record summary kept for rankings and the table view"""
    id: Any
    name: str
    sku: str
    price_amount: Optional[float]
    price_currency: str
    quantity: Optional[float]
    sold_quantity: float
    views: float
    status: str
    revenue: float


@dataclass
class AccumulatorBundle:
    """Mutable working state of one aggregation run"""
    bucket_stats: List[BucketStats]
    product_count: int = 0
    total_quantity: float = 0
    total_sold: float = 0
    total_views: float = 0
    sales_value: float = 0
    inventory_value: float = 0
    status_counts: Dict[str, int] = field(default_factory=dict)
    channel_counts: Dict[str, int] = field(default_factory=dict)
    calendar_cells: Dict[Tuple[int, int], int] = field(default_factory=dict)
    daily_revenue: Dict[str, float] = field(default_factory=dict)
    retained: List[RetainedRecord] = field(default_factory=list)
    retained_dropped: int = 0
    rating_sum: float = 0
    rating_count: int = 0
    currency: Optional[str] = None
    reported_total: Optional[int] = None
    pages_fetched: int = 0
    truncated: bool = False

    @classmethod
    def fresh(cls, definitions: DashboardDefinitions) -> "AccumulatorBundle":
        """Empty bundle with one counter per configured price bucket"""
        return cls(bucket_stats=[BucketStats() for _ in definitions.price_buckets])

    @property
    def channel_occurrences(self) -> int:
        return sum(self.channel_counts.values())


class Aggregator:
    """
    Accumulates dashboard metrics over a stream of product records.

    Example:
        aggregator = Aggregator()
        bundle = await aggregator.consume(PaginationWalker(source))
    """

    def __init__(
        self,
        definitions: DashboardDefinitions = DEFAULT_DEFINITIONS,
        now: Clock = utc_now,
    ):
        self.definitions = definitions
        self.now = now
        self.bundle = AccumulatorBundle.fresh(definitions)

    def add_raw(self, raw: Any) -> NormalizedRecord:
        """Normalize a raw record and fold it in"""
        record = normalize_record(raw, self.definitions, now=self.now)
        self.add(record)
        return record

    def add(self, record: NormalizedRecord) -> None:
        """Fold one normalized record into every accumulator"""
        bundle = self.bundle

        bundle.product_count += 1
        if record.quantity is not None:
            bundle.total_quantity = _finite_sum(bundle.total_quantity, record.quantity)
        bundle.total_sold = _finite_sum(bundle.total_sold, record.sold_quantity)
        bundle.total_views = _finite_sum(bundle.total_views, record.views)

        if bundle.currency is None:
            bundle.currency = record.price_currency

        price = record.price_amount
        revenue = 0
        if price is not None and price > 0 and record.sold_quantity > 0:
            revenue = _finite_sum(0, price * record.sold_quantity)
            bundle.sales_value = _finite_sum(bundle.sales_value, revenue)
            if revenue and record.updated_at is not None:
                day = record.updated_at.date().isoformat()
                bundle.daily_revenue[day] = _finite_sum(bundle.daily_revenue.get(day, 0), revenue)

        if price is not None and record.quantity is not None:
            bundle.inventory_value = _finite_sum(bundle.inventory_value, price * record.quantity)

        stats = bundle.bucket_stats[record.bucket_index]
        if record.quantity is not None:
            stats.available = _finite_sum(stats.available, max(record.quantity - record.sold_quantity, 0))
        stats.sold = _finite_sum(stats.sold, record.sold_quantity)

        bundle.status_counts[record.status] = bundle.status_counts.get(record.status, 0) + 1

        for channel in record.channels:
            bundle.channel_counts[channel] = bundle.channel_counts.get(channel, 0) + 1

        # Malformed timestamps are skipped for the calendar only
        if record.updated_at is not None:
            cell = (record.day_index, record.updated_at.hour)
            bundle.calendar_cells[cell] = bundle.calendar_cells.get(cell, 0) + 1

        if record.rating is not None:
            bundle.rating_sum += record.rating
            bundle.rating_count += 1

        if len(bundle.retained) < self.definitions.max_retained:
            bundle.retained.append(
                RetainedRecord(
                    id=record.id,
                    name=record.name,
                    sku=record.sku,
                    price_amount=price,
                    price_currency=record.price_currency,
                    quantity=record.quantity,
                    sold_quantity=record.sold_quantity,
                    views=record.views,
                    status=record.status,
                    revenue=revenue,
                )
            )
        else:
            bundle.retained_dropped += 1

    async def consume(self, walker: PaginationWalker) -> AccumulatorBundle:
        """
        Drain a pagination walker into the bundle.

        Each page is fully folded in before the next fetch is issued. Errors
        from the walker propagate unchanged.
        """
        async for page in walker.iter_pages():
            for raw in page.records:
                self.add_raw(raw)

        self.bundle.pages_fetched = walker.fetch_count
        self.bundle.reported_total = walker.reported_total
        self.bundle.truncated = walker.truncated

        if self.bundle.retained_dropped:
            logger.warning(
                "Retained record limit reached",
                limit=self.definitions.max_retained,
                dropped=self.bundle.retained_dropped,
            )
        return self.bundle
