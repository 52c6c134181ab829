"""
Record Normalizer

Turns one loosely-typed product record from the Salla API into a typed,
defaulted ``NormalizedRecord``.

Rules:
- A number is valid only if it is a finite int/float (bools and numeric
  strings are rejected).
- Unknown quantity is ``None`` and is kept distinct from zero.
- Normalization never raises; malformed fields fall back to defaults.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import math

import structlog

from src.config.definitions import DEFAULT_DEFINITIONS, DashboardDefinitions, PriceBucket

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NormalizedRecord:
    """Typed projection of one product record"""
    id: Any
    name: str
    sku: str
    price_amount: Optional[float]
    price_currency: str
    quantity: Optional[float]  # None = unknown
    sold_quantity: float
    views: float
    status: str
    is_available: bool
    channels: Tuple[str, ...]
    updated_at: Optional[datetime]  # None = present but unparseable
    rating: Optional[float]
    bucket_index: int

    @property
    def day_index(self) -> Optional[int]:
        """Day of week with Sunday = 0"""
        if self.updated_at is None:
            return None
        return (self.updated_at.weekday() + 1) % 7


def is_finite_number(value: Any) -> bool:
    """Check if value is a real, finite int or float"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _number(value: Any) -> Optional[float]:
    return value if is_finite_number(value) else None


def _non_negative(value: Any) -> Optional[float]:
    number = _number(value)
    if number is None or number < 0:
        return None
    return number


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        value = value.strip()
        return value or default
    if is_finite_number(value):
        return str(value)
    return default


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an API timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings, "YYYY-MM-DD HH:MM:SS[.ffffff]" strings and the
    ``{"date": ..., "timezone": ...}`` object form. Naive values without a
    timezone are taken as UTC. Returns None for anything unparseable.
    """
    tz_name = None
    if isinstance(value, Mapping):
        tz_name = value.get("timezone")
        value = value.get("date")

    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None

    if parsed.tzinfo is None:
        tzinfo = timezone.utc
        if isinstance(tz_name, str) and tz_name:
            try:
                tzinfo = ZoneInfo(tz_name)
            except (ZoneInfoNotFoundError, ValueError):
                logger.debug("Unknown timezone, assuming UTC", timezone=tz_name)
        parsed = parsed.replace(tzinfo=tzinfo)

    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        # Offsets can push values near datetime.min/max out of range
        return None


def assign_price_bucket(price: Optional[float], buckets: Sequence[PriceBucket]) -> int:
    """
    Return the index of the bucket a price falls into.

    The first bucket with ``start <= price < end`` wins; the last bucket is
    open-ended. Absent or negative prices land in the terminal bucket.
    """
    terminal = len(buckets) - 1
    if price is None or price < 0:
        return terminal
    for index, bucket in enumerate(buckets):
        if price >= bucket.start and (bucket.end is None or price < bucket.end or index == terminal):
            return index
    return terminal


def _extract_price(raw: Mapping[str, Any], default_currency: str) -> Tuple[Optional[float], str]:
    price = raw.get("price")
    if isinstance(price, Mapping):
        return _number(price.get("amount")), _text(price.get("currency"), default_currency)
    return _number(price), default_currency


def _extract_rating(raw: Mapping[str, Any]) -> Optional[float]:
    rating = raw.get("rating")
    if isinstance(rating, Mapping):
        rating = rating.get("rate")
    return _number(rating)


def _extract_channels(raw: Mapping[str, Any], default_channel: str) -> Tuple[str, ...]:
    channels = raw.get("channels")
    if isinstance(channels, str):
        channels = [channels]
    if not isinstance(channels, (list, tuple)):
        return (default_channel,)

    seen = []
    for channel in channels:
        label = _text(channel)
        if label and label not in seen:
            seen.append(label)
    return tuple(seen) or (default_channel,)


def _extract_updated_at(raw: Mapping[str, Any], now: Clock) -> Optional[datetime]:
    candidates = [raw.get(key) for key in ("updated_at", "created_at")]
    present = [value for value in candidates if value not in (None, "")]
    if not present:
        current = now()
        if current.tzinfo is None:
            return current.replace(tzinfo=timezone.utc)
        return current.astimezone(timezone.utc)
    for value in present:
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
    return None


def normalize_record(
    raw: Any,
    definitions: DashboardDefinitions = DEFAULT_DEFINITIONS,
    now: Clock = utc_now,
) -> NormalizedRecord:
    """
    Normalize a raw product record.

    Args:
        raw: Decoded JSON object for one product (anything else is treated
            as an empty record)
        definitions: Static definitions supplying defaults and price buckets
        now: Clock used when the record carries no timestamp at all

    Returns:
        NormalizedRecord
    """
    if not isinstance(raw, Mapping):
        raw = {}

    price, currency = _extract_price(raw, definitions.default_currency)
    quantity = _non_negative(raw.get("quantity"))

    is_available = raw.get("is_available")
    if not isinstance(is_available, bool):
        is_available = quantity is None or quantity > 0

    return NormalizedRecord(
        id=raw.get("id"),
        name=_text(raw.get("name")),
        sku=_text(raw.get("sku")),
        price_amount=price,
        price_currency=currency,
        quantity=quantity,
        sold_quantity=_non_negative(raw.get("sold_quantity")) or 0,
        views=_non_negative(raw.get("views")) or 0,
        status=_text(raw.get("status"), definitions.default_status),
        is_available=is_available,
        channels=_extract_channels(raw, definitions.default_channel),
        updated_at=_extract_updated_at(raw, now),
        rating=_extract_rating(raw),
        bucket_index=assign_price_bucket(price, definitions.price_buckets),
    )
