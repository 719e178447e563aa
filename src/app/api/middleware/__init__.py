"""API middleware package."""

from src.app.api.middleware.hubspot_token import HubSpotTokenMiddleware
from src.app.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "HubSpotTokenMiddleware"]
