"""
Data Ingestion Module
"""
from .pagination import (
    Page,
    PageSource,
    PaginationWalker,
    SallaProductSource,
    create_http_client,
    parse_page,
)

__all__ = [
    "Page",
    "PageSource",
    "PaginationWalker",
    "SallaProductSource",
    "create_http_client",
    "parse_page",
]
