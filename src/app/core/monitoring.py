"""Prometheus metrics and Sentry integration.

Metrics exposed on /metrics:
- http_requests_total / http_request_duration_seconds, labelled by route template
- hubspot_api_requests_total / hubspot_api_request_duration_seconds, one
  sample per outbound call to the HubSpot schema API
- property_sync_total, one sample per reconciled property (created, updated, failed)
"""

from __future__ import annotations

import time
from typing import Any

import sentry_sdk
from prometheus_client import REGISTRY, Counter, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.app.config import get_settings

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "http_requests_total",
    "Inbound HTTP requests",
    ["method", "route", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "Inbound HTTP request latency in seconds",
    ["method", "route"],
    # Uploads run one remote round trip per property, so allow long tails
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0),
)

# ── HubSpot API Metrics ──────────────────────────────────────────────────────

hubspot_api_requests_total = Counter(
    "hubspot_api_requests_total",
    "Outbound calls to the HubSpot schema API",
    ["method", "status"],
)

hubspot_api_request_duration_seconds = Histogram(
    "hubspot_api_request_duration_seconds",
    "HubSpot schema API call latency in seconds",
    ["method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# ── Property Sync Metrics ────────────────────────────────────────────────────

property_sync_total = Counter(
    "property_sync_total",
    "Property reconciliation outcomes",
    ["object_type", "outcome"],
)


def record_hubspot_call(method: str, status: str, duration: float) -> None:
    """Record one outbound HubSpot call.

    ``status`` is the HTTP status code as a string, or ``"error"`` when the
    request never produced a response.
    """
    hubspot_api_requests_total.labels(method=method, status=status).inc()
    hubspot_api_request_duration_seconds.labels(method=method).observe(duration)


# ── Metrics Middleware ───────────────────────────────────────────────────────


def _route_label(request: Request) -> str:
    # Route template once routing has run; unmatched paths collapse to one label
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request count and latency for every route except /metrics."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        route = _route_label(request)
        http_requests_total.labels(
            method=request.method, route=route, status_code=str(response.status_code)
        ).inc()
        http_request_duration_seconds.labels(method=request.method, route=route).observe(elapsed)
        return response


# ── Sentry Integration ───────────────────────────────────────────────────────


def _scrub_token(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """Drop the HubSpot token header from request data attached to an event."""
    header = get_settings().HUBSPOT_TOKEN_HEADER.lower()
    headers = event.get("request", {}).get("headers")
    if isinstance(headers, dict):
        for key in list(headers):
            if key.lower() in (header, "authorization"):
                headers[key] = "[Filtered]"
    return event


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize the Sentry SDK with the token header scrubbed from events."""
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        send_default_pii=False,
        before_send=_scrub_token,
        integrations=[StarletteIntegration(), FastApiIntegration()],
    )


def get_metrics_response() -> Response:
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
