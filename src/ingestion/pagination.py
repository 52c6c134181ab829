"""
Paged Record Source and Pagination Walker

Pulls product pages from the Salla Admin API one at a time.

The walker follows the server-supplied ``pagination.links.next`` URL verbatim
until it is absent or the page safety bound is reached. The bound (100 pages
by default) is a policy cap against pagination bugs and redirect loops, not a
guarantee of completeness: callers compare ``reported_total`` with the number
of records actually read to detect undercounting.

Any non-success page response aborts the walk with ``UpstreamFetchError``.
There are no retries.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Protocol

import httpx
import structlog

from src.config.settings import SallaSettings
from src.errors import ConfigurationError, UpstreamFetchError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_PAGES = 100


@dataclass
class Page:
    """One page of raw records plus its continuation"""
    records: List[Any] = field(default_factory=list)
    next_url: Optional[str] = None
    reported_total: Optional[int] = None


class PageSource(Protocol):
    """Anything that can fetch a page; ``url=None`` means the first page"""

    async def fetch_page(self, url: Optional[str] = None) -> Page:
        ...


def parse_page(payload: Any) -> Page:
    """
    Extract records, next link and reported total from a decoded response.

    Tolerates missing or oddly shaped ``data``/``pagination`` blocks.
    """
    if not isinstance(payload, Mapping):
        return Page()

    data = payload.get("data")
    records = list(data) if isinstance(data, list) else []

    next_url = None
    reported_total = None
    pagination = payload.get("pagination")
    if isinstance(pagination, Mapping):
        links = pagination.get("links")
        if isinstance(links, Mapping):
            candidate = links.get("next")
            if isinstance(candidate, str) and candidate.strip():
                next_url = candidate.strip()
        total = pagination.get("total")
        if isinstance(total, int) and not isinstance(total, bool):
            reported_total = total

    return Page(records=records, next_url=next_url, reported_total=reported_total)


def create_http_client(settings: SallaSettings) -> httpx.AsyncClient:
    """Create an HTTP client for one run"""
    return httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True)


class SallaProductSource:
    """
    Paged record source backed by the Salla products endpoint.

    Example:
        async with create_http_client(settings) as client:
            source = SallaProductSource(settings, client)
            page = await source.fetch_page()
    """

    def __init__(self, settings: SallaSettings, client: httpx.AsyncClient):
        if not settings.has_token:
            raise ConfigurationError("SALLA_ACCESS_TOKEN is not configured")
        self.settings = settings
        self.client = client

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.access_token.get_secret_value()}",
            "Accept": "application/json",
        }

    async def fetch_json(
        self,
        url: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Issue one GET and return the decoded JSON body.

        Args:
            url: Absolute URL to fetch; defaults to the products endpoint
            params: Query parameters (only used when fetching ``url`` as given)

        Raises:
            UpstreamFetchError: On a non-success status or undecodable body
        """
        target = url or self.settings.products_url
        response = await self.client.get(target, params=params, headers=self._headers())

        if not response.is_success:
            logger.error(
                "Upstream page request failed",
                url=target,
                status_code=response.status_code,
            )
            raise UpstreamFetchError(response.status_code, response.text, url=target)

        try:
            return response.json()
        except ValueError:
            raise UpstreamFetchError(response.status_code, "response body is not valid JSON", url=target)

    async def fetch_page(self, url: Optional[str] = None) -> Page:
        if url is None:
            payload = await self.fetch_json(params={"per_page": self.settings.per_page})
        else:
            # next links already carry their own query string
            payload = await self.fetch_json(url)
        return parse_page(payload)


class PaginationWalker:
    """
    Drive a page source until exhaustion or the safety bound.

    Attributes:
        fetch_count: Number of page requests issued so far
        reported_total: First page's server-reported record total, if any
        truncated: True when the walk stopped at the safety bound while the
            server still advertised another page
    """

    def __init__(self, source: PageSource, max_pages: int = DEFAULT_MAX_PAGES):
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.source = source
        self.max_pages = max_pages
        self.fetch_count = 0
        self.reported_total: Optional[int] = None
        self.truncated = False

    async def iter_pages(self) -> AsyncIterator[Page]:
        """Yield pages lazily; the next fetch starts only after the consumer resumes"""
        next_url: Optional[str] = None

        while True:
            page = await self.source.fetch_page(next_url)
            self.fetch_count += 1

            if self.fetch_count == 1:
                self.reported_total = page.reported_total

            logger.debug(
                "Page fetched",
                page=self.fetch_count,
                records=len(page.records),
                has_next=page.next_url is not None,
            )

            yield page

            if page.next_url is None:
                break
            if self.fetch_count >= self.max_pages:
                self.truncated = True
                logger.warning(
                    "Pagination safety bound reached",
                    max_pages=self.max_pages,
                    reported_total=self.reported_total,
                )
                break
            next_url = page.next_url

    async def iter_records(self) -> AsyncIterator[Any]:
        """Flatten pages into a stream of raw records"""
        async for page in self.iter_pages():
            for record in page.records:
                yield record
