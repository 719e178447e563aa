"""Remote property schema layer -- pluggable adapter for the CRM schema API.

Provides the abstract PropertySchemaAdapter interface and the HubSpot
implementation used by the sync engine.
"""

from src.app.properties.crm.adapter import PropertySchemaAdapter, SchemaClientError
from src.app.properties.crm.hubspot import HubSpotSchemaAdapter

__all__ = [
    "PropertySchemaAdapter",
    "SchemaClientError",
    "HubSpotSchemaAdapter",
]
