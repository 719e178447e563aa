"""HubSpot property schema adapter -- async HTTP client for the CRM properties API.

Implements PropertySchemaAdapter against HubSpot's v3 REST endpoints:
- GET/POST  /crm/v3/properties/{objectType}/groups
- GET/POST  /crm/v3/properties/{objectType}
- PATCH     /crm/v3/properties/{objectType}/{propertyName}
- GET       /account-info/v3/details

Uses a fresh httpx.AsyncClient per call with the private app token as bearer.
Calls are never retried here: a failed property is recorded as failed by the
engine and the run moves on. Every transport or HTTP error is re-raised as
SchemaClientError carrying HubSpot's own message when the body has one.
"""

from __future__ import annotations

import time
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from src.app.core.monitoring import record_hubspot_call
from src.app.properties.crm.adapter import PropertySchemaAdapter, SchemaClientError
from src.app.properties.schemas import PropertyDescriptor, PropertyGroup

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.hubapi.com"


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of HubSpot's error message from a response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code} from {response.request.method} {response.request.url.path}"


def _segment(value: str) -> str:
    """Percent-encode one URL path segment taken from a sheet cell.

    "/" is encoded and dot-only segments are spelled out, so a cell can never
    move the request to another object type or endpoint.
    """
    encoded = quote(value, safe="")
    if encoded.strip(".") == "":
        return encoded.replace(".", "%2E")
    return encoded


class HubSpotSchemaAdapter(PropertySchemaAdapter):
    """HubSpot CRM properties API adapter bound to one access token.

    Args:
        token: HubSpot private app access token (``pat-...``).
        base_url: API root, overridable for sandboxes and tests.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client with the bearer header."""
        return httpx.AsyncClient(headers=self._headers, timeout=self._timeout)

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None if empty).

        Raises:
            SchemaClientError: On transport failure or any non-2xx response.
        """
        url = f"{self._base_url}{path}"
        started = time.perf_counter()
        try:
            async with self._client() as client:
                response = await client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            record_hubspot_call(method, "error", time.perf_counter() - started)
            logger.error("hubspot.transport_error", method=method, path=path, error=str(exc))
            raise SchemaClientError(f"{method} {path} failed: {exc}") from exc

        record_hubspot_call(method, str(response.status_code), time.perf_counter() - started)
        if response.is_error:
            message = _error_message(response)
            logger.error(
                "hubspot.request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
            )
            raise SchemaClientError(message, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise SchemaClientError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

    async def _get_object(self, path: str) -> dict[str, Any]:
        data = await self._request("GET", path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise SchemaClientError(f"GET {path} returned {type(data).__name__}, expected an object")
        return data

    async def get_account_identity(self) -> str:
        """Return portalId (falling back to hubId) from the account details."""
        data = await self._get_object("/account-info/v3/details")
        identity = data.get("portalId") or data.get("hubId")
        if identity is None:
            raise SchemaClientError("Account details did not include a portalId")
        return str(identity)

    async def list_groups(self, object_type: str) -> list[PropertyGroup]:
        data = await self._get_object(f"/crm/v3/properties/{_segment(object_type)}/groups")
        groups = [
            PropertyGroup(name=g["name"], label=g.get("label", ""))
            for g in data.get("results", [])
        ]
        logger.debug("hubspot.groups_listed", object_type=object_type, count=len(groups))
        return groups

    async def create_group(self, object_type: str, name: str) -> PropertyGroup:
        data = await self._request(
            "POST",
            f"/crm/v3/properties/{_segment(object_type)}/groups",
            json={"name": name, "label": name},
        )
        if not isinstance(data, dict):
            data = {}
        logger.info("hubspot.group_created", object_type=object_type, group_name=name)
        return PropertyGroup(name=data.get("name", name), label=data.get("label", name))

    async def list_properties(self, object_type: str) -> list[str]:
        data = await self._get_object(f"/crm/v3/properties/{_segment(object_type)}")
        names = [p["name"] for p in data.get("results", [])]
        logger.debug("hubspot.properties_listed", object_type=object_type, count=len(names))
        return names

    async def create_property(self, descriptor: PropertyDescriptor) -> None:
        await self._request(
            "POST",
            f"/crm/v3/properties/{_segment(descriptor.object_type)}",
            json=descriptor.to_create_payload(),
        )
        logger.info(
            "hubspot.property_created",
            object_type=descriptor.object_type,
            name=descriptor.name,
        )

    async def update_property(self, name: str, descriptor: PropertyDescriptor) -> None:
        await self._request(
            "PATCH",
            f"/crm/v3/properties/{_segment(descriptor.object_type)}/{_segment(name)}",
            json=descriptor.to_update_payload(),
        )
        logger.info(
            "hubspot.property_updated",
            object_type=descriptor.object_type,
            name=name,
        )
