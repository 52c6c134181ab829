"""
API Module
"""
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from .responses import failure_response, success_body

__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "failure_response",
    "success_body",
]
