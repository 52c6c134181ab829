"""
Response Envelopes

Every endpoint answers with ``{success: true, status, ...}`` or the uniform
failure envelope ``{success: false, message, error}``. Partial results are
never wrapped as success.
"""

from typing import Any, Dict

import httpx
import structlog
from fastapi.responses import JSONResponse

from src.errors import InsightsError

logger = structlog.get_logger(__name__)


def success_body(**payload: Any) -> Dict[str, Any]:
    return {"success": True, "status": 200, **payload}


def failure_response(error: Exception, message: str) -> JSONResponse:
    """
    Map a fatal error onto the failure envelope.

    ``InsightsError`` subclasses carry their own HTTP status; transport
    failures talking to the upstream API map to 502; anything else to 500.
    """
    if isinstance(error, InsightsError):
        status_code = error.http_status
    elif isinstance(error, httpx.HTTPError):
        status_code = 502
    else:
        status_code = 500

    logger.error(
        message,
        error=str(error),
        error_type=type(error).__name__,
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": str(error)},
    )
