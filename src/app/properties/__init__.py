"""HubSpot property sync -- spreadsheet rows reconciled against the CRM schema.

Provides:
- map_row_to_property / parse_dropdown_options: row validation and mapping
- PropertySyncEngine: per-run create-or-update orchestration with caching
- AuditLog: per-run JSON audit artifact
- run_property_sync: end-to-end run over a decoded workbook
- read_workbook: .xlsx decoding into named sheets of raw rows
"""

from src.app.properties.audit import AuditLog, AuditLogError
from src.app.properties.cache import PropertyCache
from src.app.properties.engine import PropertySyncEngine
from src.app.properties.mapper import (
    PropertyValidationError,
    map_row_to_property,
    parse_dropdown_options,
)
from src.app.properties.service import run_property_sync
from src.app.properties.workbook import WorkbookError, read_workbook

__all__ = [
    "AuditLog",
    "AuditLogError",
    "PropertyCache",
    "PropertySyncEngine",
    "PropertyValidationError",
    "map_row_to_property",
    "parse_dropdown_options",
    "run_property_sync",
    "WorkbookError",
    "read_workbook",
]
