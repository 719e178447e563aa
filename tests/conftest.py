"""Shared fixtures for property sync tests.

Provides:
- InMemorySchemaAdapter: PropertySchemaAdapter test double with call tracking
  and injectable failures (no HTTP calls)
- make_row(): spreadsheet row builder with sensible defaults
- audit_dir: temporary audit log directory
"""

from __future__ import annotations

from collections import defaultdict

import pytest

from src.app.properties.crm.adapter import PropertySchemaAdapter, SchemaClientError
from src.app.properties.schemas import PropertyDescriptor, PropertyGroup

VALID_TOKEN = "pat-na1-0123456789abcdef0123456789"


class InMemorySchemaAdapter(PropertySchemaAdapter):
    """In-memory remote schema for testing without HubSpot.

    ``remote`` is shared between adapter instances so two runs can observe
    each other's writes, like two uploads against one account.
    """

    def __init__(self, remote: dict | None = None, identity: str = "12345") -> None:
        self.remote = remote if remote is not None else {"groups": defaultdict(set), "properties": defaultdict(dict)}
        self.identity = identity
        self.calls: list[tuple] = []
        self.fail_on: dict[tuple[str, str], str] = {}

    def fail(self, operation: str, name: str, message: str) -> None:
        """Make operation (e.g. "create_property") raise for property/group name."""
        self.fail_on[(operation, name)] = message

    def _check(self, operation: str, name: str) -> None:
        message = self.fail_on.get((operation, name))
        if message is not None:
            raise SchemaClientError(message, status_code=400)

    async def get_account_identity(self) -> str:
        self.calls.append(("get_account_identity",))
        self._check("get_account_identity", "")
        return self.identity

    async def list_groups(self, object_type: str) -> list[PropertyGroup]:
        self.calls.append(("list_groups", object_type))
        return [PropertyGroup(name=n, label=n) for n in sorted(self.remote["groups"][object_type])]

    async def create_group(self, object_type: str, name: str) -> PropertyGroup:
        self.calls.append(("create_group", object_type, name))
        self._check("create_group", name)
        self.remote["groups"][object_type].add(name)
        return PropertyGroup(name=name, label=name)

    async def list_properties(self, object_type: str) -> list[str]:
        self.calls.append(("list_properties", object_type))
        return list(self.remote["properties"][object_type])

    async def create_property(self, descriptor: PropertyDescriptor) -> None:
        self.calls.append(("create_property", descriptor.object_type, descriptor.name))
        self._check("create_property", descriptor.name)
        self.remote["properties"][descriptor.object_type][descriptor.name] = descriptor

    async def update_property(self, name: str, descriptor: PropertyDescriptor) -> None:
        self.calls.append(("update_property", descriptor.object_type, name))
        self._check("update_property", name)
        self.remote["properties"][descriptor.object_type][name] = descriptor

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


def make_row(**overrides) -> dict:
    """Spreadsheet row with sensible defaults; keys use the sheet's column names."""
    row = {
        "Object Type": "contacts",
        "Group Name": "custom_information",
        "Property Name": "favorite_color",
        "Label": "Favorite Color",
        "Type": "text",
        "Field Type": "",
        "Dropdown Values": "",
        "Multiple": "",
    }
    row.update(overrides)
    return row


@pytest.fixture
def adapter() -> InMemorySchemaAdapter:
    return InMemorySchemaAdapter()


@pytest.fixture
def audit_dir(tmp_path):
    return tmp_path / "logs"
