"""Property schema adapter abstract base class -- the remote schema contract.

Every schema backend (HubSpot today) implements this ABC. The
PropertySyncEngine depends only on this interface, so tests substitute an
in-memory implementation and a run never knows which backend it talks to.

An adapter instance is bound to one credential for its whole lifetime; build a
new instance per run instead of swapping tokens on a shared one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.app.properties.schemas import PropertyDescriptor, PropertyGroup


class SchemaClientError(Exception):
    """Any failure talking to, or rejected by, the remote schema service.

    Args:
        message: Human-readable reason, preferably the service's own message.
        status_code: HTTP status when the service answered, else None.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PropertySchemaAdapter(ABC):
    """Abstract interface for remote property schema operations.

    Methods:
        get_account_identity: Stable account identifier for audit file naming.
        list_groups: List property groups of an object type.
        create_group: Create a property group (label defaults to name).
        list_properties: List property names of an object type.
        create_property: Create a property from a descriptor.
        update_property: Update an existing property to match a descriptor.
    """

    @abstractmethod
    async def get_account_identity(self) -> str:
        """Return the account (portal) id the credential belongs to."""
        ...

    @abstractmethod
    async def list_groups(self, object_type: str) -> list[PropertyGroup]:
        """List property groups for object_type."""
        ...

    @abstractmethod
    async def create_group(self, object_type: str, name: str) -> PropertyGroup:
        """Create a property group named name under object_type."""
        ...

    @abstractmethod
    async def list_properties(self, object_type: str) -> list[str]:
        """List the names of every property defined for object_type."""
        ...

    @abstractmethod
    async def create_property(self, descriptor: PropertyDescriptor) -> None:
        """Create descriptor.name under descriptor.object_type."""
        ...

    @abstractmethod
    async def update_property(self, name: str, descriptor: PropertyDescriptor) -> None:
        """Update property name under descriptor.object_type to match descriptor."""
        ...
