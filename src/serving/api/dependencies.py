"""
API Dependencies

Per-request collaborators for the route handlers. Each request gets its own
HTTP client and page source; tests swap these out through
``app.dependency_overrides``.
"""

from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable

from src.config import DEFAULT_DEFINITIONS, DashboardDefinitions, SallaSettings, get_settings
from src.errors import ConfigurationError
from src.ingestion.pagination import SallaProductSource, create_http_client
from src.transformation.normalizer import Clock, utc_now

SourceOpener = Callable[[SallaSettings], AsyncContextManager[SallaProductSource]]


@asynccontextmanager
async def open_product_source(settings: SallaSettings) -> AsyncIterator[SallaProductSource]:
    """
    Open a Salla product source backed by a fresh HTTP client.

    Raises:
        ConfigurationError: No access token is configured (before any I/O)
    """
    if not settings.has_token:
        raise ConfigurationError("SALLA_ACCESS_TOKEN is not configured")

    async with create_http_client(settings) as client:
        yield SallaProductSource(settings, client)


def get_salla_settings() -> SallaSettings:
    return get_settings().salla


def get_source_opener() -> SourceOpener:
    return open_product_source


def get_definitions() -> DashboardDefinitions:
    return DEFAULT_DEFINITIONS


def get_clock() -> Clock:
    return utc_now
