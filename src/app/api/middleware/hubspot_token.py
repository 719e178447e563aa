"""HubSpot token header validation middleware.

Guards every path under PROTECTED_PATH_PREFIX. The token header
(settings.HUBSPOT_TOKEN_HEADER, ``x-hubspot-api-key`` by default) must be
present, start with the private app prefix (``pat-``) and be at least
HUBSPOT_TOKEN_MIN_LENGTH characters long. Rejections are answered with 401
directly from the middleware; the token itself is never logged.
"""

from __future__ import annotations

import structlog
from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.app.config import Settings, get_settings

logger = structlog.get_logger(__name__)

PROTECTED_PATH_PREFIX = "/api/v1/hubspot"


def validate_token(token: str | None, settings: Settings) -> str | None:
    """Return a rejection reason for token, or None if it is acceptable."""
    if not token:
        return (
            "Missing HubSpot API token. "
            f"Please provide {settings.HUBSPOT_TOKEN_HEADER} header."
        )
    if not token.startswith(settings.HUBSPOT_TOKEN_PREFIX):
        return (
            "Invalid HubSpot API token. "
            f'Token must start with "{settings.HUBSPOT_TOKEN_PREFIX}".'
        )
    if len(token) < settings.HUBSPOT_TOKEN_MIN_LENGTH:
        return "Invalid HubSpot API token. Token length is too short."
    return None


class HubSpotTokenMiddleware(BaseHTTPMiddleware):
    """Rejects HubSpot routes called without a well-formed token header."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(PROTECTED_PATH_PREFIX):
            return await call_next(request)

        settings = get_settings()
        token = request.headers.get(settings.HUBSPOT_TOKEN_HEADER)
        reason = validate_token(token, settings)
        if reason is not None:
            logger.warning(
                "hubspot_token.rejected",
                path=request.url.path,
                reason=reason,
                token_length=len(token) if token else 0,
            )
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": reason},
            )

        logger.debug("hubspot_token.validated", path=request.url.path)
        return await call_next(request)
