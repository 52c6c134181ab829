"""
FastAPI Application

Main entry point for the Catalog Insights API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import structlog

from src.config import get_settings
from src.serving.api.responses import failure_response
from src.serving.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from src.serving.api.routes import (
    health_router,
    dashboard_router,
    products_router,
)

settings = get_settings()
logger = structlog.get_logger(__name__)

UNHANDLED_FAILURE_MESSAGE = "Failed to process the request"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    from src.config.logging import configure_logging
    configure_logging("DEBUG" if settings.debug else None)

    logger.info(
        "Starting Catalog Insights API",
        environment=settings.app_env,
        products_url=settings.salla.products_url,
    )
    if not settings.salla.has_token:
        logger.warning("SALLA_ACCESS_TOKEN is not set; aggregation requests will fail")

    yield

    logger.info("Shutting down...")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Catalog Insights API",
        description="Dashboard-ready product metrics aggregated from the Salla Admin API",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Fatal errors outside the route bodies still use the failure envelope."""
        return failure_response(exc, UNHANDLED_FAILURE_MESSAGE)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(dashboard_router, tags=["Dashboard"])
    app.include_router(products_router, tags=["Products"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Catalog Insights API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
