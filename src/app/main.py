"""FastAPI application factory for the HubSpot property sync service."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from src.app.api.middleware.hubspot_token import HubSpotTokenMiddleware
from src.app.api.middleware.logging import LoggingMiddleware, configure_structlog
from src.app.api.v1.router import router as v1_router
from src.app.config import Settings, get_settings
from src.app.core.monitoring import MetricsMiddleware, get_metrics_response, init_sentry


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_structlog()
    log = structlog.get_logger(__name__)

    if settings.SENTRY_DSN:
        init_sentry(dsn=settings.SENTRY_DSN, environment=settings.ENVIRONMENT.value)

    log.info(
        "app.started",
        environment=settings.ENVIRONMENT.value,
        hubspot_api=settings.HUBSPOT_API_BASE_URL,
        audit_log_dir=settings.AUDIT_LOG_DIR,
        sentry=bool(settings.SENTRY_DSN),
    )
    yield
    log.info("app.shutdown")


def _cors_origins(settings: Settings) -> list[str]:
    if settings.CORS_ALLOWED_ORIGINS.strip() == "*":
        return ["*"]
    return [o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]


def create_app() -> FastAPI:
    """Build the app.

    Middleware, outermost first: metrics, request logging, CORS, then the
    HubSpot token check, so rejected uploads are still logged and counted.
    """
    settings = get_settings()
    app = FastAPI(
        title="HubSpot Property Sync API",
        version="0.1.0",
        description="Create and update HubSpot CRM properties from Excel workbooks",
        lifespan=lifespan,
    )

    # add_middleware prepends, so register innermost first
    app.add_middleware(HubSpotTokenMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(MetricsMiddleware)

    app.include_router(v1_router)

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return get_metrics_response()

    return app


app = create_app()
