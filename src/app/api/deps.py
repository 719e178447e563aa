"""FastAPI dependency injection for the property sync endpoints.

These dependencies are used in endpoint function signatures so tests can
swap the remote schema backend and the audit directory via
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, Request

from src.app.config import Settings, get_settings
from src.app.properties.service import AdapterFactory, hubspot_adapter_factory


async def get_app_settings() -> Settings:
    """Get the cached application settings."""
    return get_settings()


async def get_adapter_factory(
    settings: Settings = Depends(get_app_settings),
) -> AdapterFactory:
    """Get the factory building one schema adapter per sync run."""
    return hubspot_adapter_factory(settings)


async def get_audit_log_dir(
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Get the directory receiving per-run audit artifacts."""
    return settings.AUDIT_LOG_DIR


async def get_hubspot_token(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> str | None:
    """Get the caller's HubSpot token from the configured header, if sent."""
    return request.headers.get(settings.HUBSPOT_TOKEN_HEADER)
