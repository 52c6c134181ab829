"""
Dashboard Definitions

Static, immutable configuration for the aggregation pipeline: price bands,
color palettes, channel labels and the calendar axis. Instances are injected
into the aggregator and view builders; nothing here is mutated at runtime.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class PriceBucket:
    """Half-open price range [start, end) with a display label"""
    label: str
    start: float
    end: Optional[float] = None  # None = open-ended terminal bucket

    @property
    def is_terminal(self) -> bool:
        return self.end is None

    def contains(self, price: float) -> bool:
        if price < self.start:
            return False
        return self.is_terminal or price < self.end


@dataclass(frozen=True)
class ChannelDefinition:
    """Display metadata for a known sales channel"""
    key: str
    label: str
    color: str


@dataclass(frozen=True)
class DashboardDefinitions:
    """
    Bundle of static definitions used by one aggregation run.

    The last bucket must be open-ended; records with no usable price fall
    into it by convention.
    """
    price_buckets: Tuple[PriceBucket, ...]
    status_palette: Tuple[str, ...]
    channel_palette: Tuple[str, ...]
    channels: Tuple[ChannelDefinition, ...]
    day_labels: Tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
    default_currency: str = "SAR"
    default_channel: str = "web"
    default_status: str = "unknown"
    top_products_limit: int = 10
    table_row_limit: int = 20
    max_retained: int = 10_000
    low_stock_threshold: int = 5
    status_tones: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.price_buckets:
            raise ValueError("At least one price bucket is required")
        if not self.price_buckets[-1].is_terminal:
            raise ValueError("The last price bucket must be open-ended")
        if not self.status_palette or not self.channel_palette:
            raise ValueError("Color palettes must not be empty")
        if len(self.day_labels) != 7:
            raise ValueError("day_labels must list seven days starting on Sunday")

    @property
    def terminal_bucket_index(self) -> int:
        return len(self.price_buckets) - 1

    def channel(self, key: str) -> Optional[ChannelDefinition]:
        for definition in self.channels:
            if definition.key == key:
                return definition
        return None


DEFAULT_PRICE_BUCKETS = (
    PriceBucket(label="0-50", start=0, end=50),
    PriceBucket(label="50-100", start=50, end=100),
    PriceBucket(label="100-200", start=100, end=200),
    PriceBucket(label="200-500", start=200, end=500),
    PriceBucket(label="500+", start=500),
)

DEFAULT_STATUS_PALETTE = (
    "#4F46E5",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#06B6D4",
    "#EC4899",
    "#84CC16",
)

DEFAULT_CHANNEL_PALETTE = (
    "#0EA5E9",
    "#22C55E",
    "#F97316",
    "#A855F7",
    "#E11D48",
    "#14B8A6",
)

DEFAULT_CHANNELS = (
    ChannelDefinition(key="web", label="Web Store", color="#2563EB"),
    ChannelDefinition(key="app", label="Mobile App", color="#16A34A"),
)

DEFAULT_STATUS_TONES = {
    "sale": "success",
    "out": "danger",
    "hidden": "warning",
    "deleted": "danger",
}

DEFAULT_DEFINITIONS = DashboardDefinitions(
    price_buckets=DEFAULT_PRICE_BUCKETS,
    status_palette=DEFAULT_STATUS_PALETTE,
    channel_palette=DEFAULT_CHANNEL_PALETTE,
    channels=DEFAULT_CHANNELS,
    status_tones=DEFAULT_STATUS_TONES,
)
