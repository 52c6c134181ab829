"""
Test Suite Configuration
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import pytest

from src.config import DEFAULT_DEFINITIONS, DashboardDefinitions, SallaSettings
from src.ingestion.pagination import Page, parse_page

PRODUCTS_URL = "https://api.salla.dev/admin/v2/products"


class FakePageSource:
    """In-memory page source replaying decoded API payloads in order"""

    def __init__(self, payloads: List[Dict[str, Any]]):
        self.payloads = payloads
        self.requested: List[Optional[str]] = []
        self.last_params = None

    async def fetch_page(self, url: Optional[str] = None) -> Page:
        self.requested.append(url)
        index = len(self.requested) - 1
        if index >= len(self.payloads):
            raise AssertionError("walker fetched past the last page")
        return parse_page(self.payloads[index])

    async def fetch_json(self, url=None, params=None):
        self.requested.append(url)
        self.last_params = params
        return self.payloads[0]


class EndlessPageSource:
    """Page source whose server always claims there is another page"""

    def __init__(self):
        self.requested: List[Optional[str]] = []

    async def fetch_page(self, url: Optional[str] = None) -> Page:
        self.requested.append(url)
        page_number = len(self.requested)
        return Page(
            records=[{"id": page_number, "quantity": 1}],
            next_url=f"{PRODUCTS_URL}?page={page_number + 1}",
            reported_total=1_000_000,
        )


@pytest.fixture
def fixed_now() -> datetime:
    """Sunday 2024-01-07 09:15 UTC"""
    return datetime(2024, 1, 7, 9, 15, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> Callable[[], datetime]:
    return lambda: fixed_now


@pytest.fixture
def definitions() -> DashboardDefinitions:
    return DEFAULT_DEFINITIONS


@pytest.fixture
def salla_settings() -> SallaSettings:
    return SallaSettings(
        access_token="test-token",
        products_url=PRODUCTS_URL,
        request_timeout=5.0,
        aggregation_timeout=10.0,
    )


@pytest.fixture
def product_factory() -> Callable[..., Dict[str, Any]]:
    """Build raw Salla product records with sensible defaults"""

    def make(**overrides: Any) -> Dict[str, Any]:
        product = {
            "id": 1,
            "name": "Cardamom Coffee",
            "sku": "COF-001",
            "price": {"amount": 100, "currency": "SAR"},
            "quantity": 10,
            "sold_quantity": 3,
            "views": 0,
            "status": "sale",
            "is_available": True,
            "channels": ["web"],
            "updated_at": "2024-03-05 14:30:00",
        }
        product.update(overrides)
        return product

    return make


@pytest.fixture
def payload_factory(product_factory) -> Callable[..., List[Dict[str, Any]]]:
    """Build a chain of page payloads linked through pagination.links.next"""

    def make(sizes: List[int], total: Optional[int] = None) -> List[Dict[str, Any]]:
        payloads = []
        next_id = 1
        for index, size in enumerate(sizes):
            records = []
            for _ in range(size):
                records.append(product_factory(id=next_id, sku=f"SKU-{next_id:04d}", sold_quantity=next_id % 7))
                next_id += 1
            is_last = index == len(sizes) - 1
            payloads.append({
                "status": 200,
                "success": True,
                "data": records,
                "pagination": {
                    "count": size,
                    "total": sum(sizes) if total is None else total,
                    "perPage": 100,
                    "currentPage": index + 1,
                    "totalPages": len(sizes),
                    "links": {} if is_last else {"next": f"{PRODUCTS_URL}?page={index + 2}"},
                },
            })
        return payloads

    return make


@pytest.fixture
def fake_source_factory() -> Callable[[List[Dict[str, Any]]], FakePageSource]:
    return FakePageSource


@pytest.fixture
def endless_source() -> EndlessPageSource:
    return EndlessPageSource()
