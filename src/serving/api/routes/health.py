"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from src.config import SallaSettings, get_settings
from src.serving.api.dependencies import get_salla_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    salla: SallaSettings = Depends(get_salla_settings),
) -> HealthResponse:
    """
    Health check endpoint.

    Checks:
    - Application status
    - Salla credential configured (no network call is made)
    """
    settings = get_settings()
    checks = {
        "salla": {
            "status": "configured" if salla.has_token else "missing_token",
            "products_url": salla.products_url,
        },
    }

    return HealthResponse(
        status="healthy" if salla.has_token else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(
    response: Response,
    salla: SallaSettings = Depends(get_salla_settings),
) -> Dict[str, str]:
    """
    Kubernetes readiness probe endpoint.

    Returns 503 until the Salla access token is configured.
    """
    if not salla.has_token:
        response.status_code = 503
        return {"status": "not_ready", "reason": "salla_token_missing"}

    return {"status": "ready"}
