"""Integration tests for the Excel upload endpoint and token middleware.

Uses the real app factory with the schema adapter factory and audit
directory overridden, and httpx AsyncClient over ASGITransport.
"""

from __future__ import annotations

import json
import threading
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.app.api.deps import get_adapter_factory, get_audit_log_dir
from src.app.config import get_settings
from src.app.main import create_app
from src.app.properties.workbook import read_workbook
from tests.conftest import VALID_TOKEN, InMemorySchemaAdapter
from tests.test_workbook import HEADER, build_workbook

URL = "/api/v1/hubspot/properties/create-from-excel"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _files(content: bytes) -> dict:
    return {"file": ("properties.xlsx", content, XLSX)}


@pytest_asyncio.fixture
async def client(adapter, audit_dir):
    app = create_app()
    app.dependency_overrides[get_adapter_factory] = lambda: (lambda token: adapter)
    app.dependency_overrides[get_audit_log_dir] = lambda: str(audit_dir)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestCreateFromExcel:
    async def test_sync_completed(self, client, adapter, audit_dir):
        content = build_workbook({
            "Contacts": [
                HEADER,
                ["contacts", "info", "favorite_color", "Favorite Color", "enumeration", "", "Red; Blue", "yes"],
                ["contacts", "info", "is_vip", "VIP", "boolean", "", "", ""],
            ],
            "Deals": [
                HEADER,
                ["deals", "deal_info", "close_reason", "Close Reason", "text", "", "", ""],
            ],
        })

        response = await client.post(URL, files=_files(content), headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 200
        assert response.json() == {
            "message": "HubSpot property sync completed",
            "sheetsProcessed": ["Contacts", "Deals"],
        }
        assert set(adapter.remote["properties"]["contacts"]) == {"favorite_color", "is_vip"}
        assert set(adapter.remote["properties"]["deals"]) == {"close_reason"}
        [artifact] = list(audit_dir.glob("*.log.json"))
        assert [e["status"] for e in json.loads(artifact.read_text())] == ["success"] * 3

    async def test_remote_failures_do_not_fail_request(self, client, adapter):
        adapter.fail("create_property", "a", "Invalid name")
        content = build_workbook({"S": [HEADER, ["contacts", "g", "a", "A", "text"]]})

        response = await client.post(URL, files=_files(content), headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 200
        assert response.json()["sheetsProcessed"] == ["S"]

    async def test_unsupported_type_is_400(self, client):
        content = build_workbook({"S": [HEADER, ["contacts", "g", "a", "A", "currency"]]})

        response = await client.post(URL, files=_files(content), headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Failed to process Excel file: Unsupported property type: currency"
        )

    async def test_unreadable_workbook_is_400(self, client):
        response = await client.post(URL, files=_files(b"not excel"), headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Failed to process Excel file:")

    async def test_missing_file_is_400(self, client):
        response = await client.post(URL, headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 400
        assert response.json()["detail"] == "Excel file is required"

    async def test_workbook_decoded_in_worker_thread(self, client):
        content = build_workbook({"S": [HEADER]})
        threads = []

        def recording_read(data):
            threads.append(threading.get_ident())
            return read_workbook(data)

        with patch("src.app.api.v1.hubspot.read_workbook", side_effect=recording_read):
            response = await client.post(URL, files=_files(content), headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 200
        assert threads and threads[0] != threading.get_ident()


class TestHubSpotTokenMiddleware:
    @pytest.mark.parametrize(
        "headers,reason",
        [
            ({}, "Missing HubSpot API token"),
            ({"x-hubspot-api-key": "key-" + "x" * 40}, 'must start with "pat-"'),
            ({"x-hubspot-api-key": "pat-short"}, "too short"),
        ],
    )
    async def test_rejects_bad_tokens(self, client, adapter, headers, reason):
        content = build_workbook({"S": [HEADER]})

        response = await client.post(URL, files=_files(content), headers=headers)

        assert response.status_code == 401
        assert reason in response.json()["detail"]
        assert adapter.calls == []

    async def test_header_name_is_case_insensitive(self, client):
        content = build_workbook({"S": [HEADER]})

        response = await client.post(URL, files=_files(content), headers={"X-HubSpot-Api-Key": VALID_TOKEN})

        assert response.status_code == 200

    async def test_health_is_not_guarded(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "X-Request-ID" in response.headers

    async def test_metrics_endpoint(self, client):
        await client.get("/health")
        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
        assert "property_sync_total" in response.text


class TestInfrastructureRoutes:
    async def test_caller_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "upload-42"})

        assert response.headers["X-Request-ID"] == "upload-42"

    async def test_ready_when_audit_dir_writable(self, client, audit_dir):
        response = await client.get("/health/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "audit_log_dir": str(audit_dir)}

    async def test_not_ready_when_audit_dir_is_a_file(self, client, audit_dir):
        audit_dir.parent.mkdir(parents=True, exist_ok=True)
        audit_dir.write_text("occupied")

        response = await client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestConfiguredTokenHeader:
    @pytest.fixture
    def custom_header(self, monkeypatch):
        monkeypatch.setenv("HUBSPOT_TOKEN_HEADER", "X-HS-Token")
        get_settings.cache_clear()
        yield "x-hs-token"
        get_settings.cache_clear()

    async def test_token_read_from_configured_header(self, custom_header, client, adapter):
        content = build_workbook({"S": [HEADER, ["contacts", "g", "a", "A", "text"]]})

        response = await client.post(URL, files=_files(content), headers={custom_header: VALID_TOKEN})

        assert response.status_code == 200
        assert response.json()["sheetsProcessed"] == ["S"]
        assert set(adapter.remote["properties"]["contacts"]) == {"a"}

    async def test_default_header_no_longer_accepted(self, custom_header, client, adapter):
        content = build_workbook({"S": [HEADER]})

        response = await client.post(URL, files=_files(content), headers={"x-hubspot-api-key": VALID_TOKEN})

        assert response.status_code == 401
        assert "x-hs-token" in response.json()["detail"]
        assert adapter.calls == []
