"""
Aggregation Error Taxonomy

Every fatal failure of an aggregation run is an ``InsightsError``. The serving
layer maps each subclass to an HTTP status and the uniform failure envelope.
Malformed record fields are never errors; the normalizer degrades them to
defaults instead.
"""

from typing import Optional


class InsightsError(Exception):
    """Base class for fatal aggregation failures"""

    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(InsightsError):
    """Required configuration (e.g. the API token) is missing"""

    http_status = 500


class UpstreamFetchError(InsightsError):
    """A page request returned a non-success response"""

    http_status = 502

    def __init__(self, status_code: int, body: Optional[str] = None, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body or ""
        self.url = url
        super().__init__(f"Salla API responded with {status_code}: {self.body or 'no body'}")


class AggregationTimeoutError(InsightsError):
    """The run did not finish before the configured aggregation timeout"""

    http_status = 504

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Aggregation did not complete within {timeout_seconds:g}s")
