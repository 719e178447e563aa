"""Pydantic schemas for HubSpot property sync -- descriptors, options, audit records.

Defines all structured types for the sheet-to-schema reconciliation:
- Enums: RawPropertyType, PropertyType, FieldType, YesNo, AuditStatus
- Property payloads: PropertyOption, PropertyDescriptor, PropertyGroup
- Run output: AuditRecord, SyncSummary
- ROW_COLUMNS: fixed spreadsheet column names read by the row mapper
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


# ── Spreadsheet Columns ─────────────────────────────────────────────────────

COL_OBJECT_TYPE = "Object Type"
COL_GROUP_NAME = "Group Name"
COL_PROPERTY_NAME = "Property Name"
COL_LABEL = "Label"
COL_TYPE = "Type"
COL_FIELD_TYPE = "Field Type"
COL_DROPDOWN_VALUES = "Dropdown Values"
COL_MULTIPLE = "Multiple"

ROW_COLUMNS: tuple[str, ...] = (
    COL_OBJECT_TYPE,
    COL_GROUP_NAME,
    COL_PROPERTY_NAME,
    COL_LABEL,
    COL_TYPE,
    COL_FIELD_TYPE,
    COL_DROPDOWN_VALUES,
    COL_MULTIPLE,
)

# One spreadsheet row keyed by column name. Cells are strings except for
# native spreadsheet booleans, which the decoder passes through untouched.
RawRow = dict[str, Union[str, bool]]


# ── Enums ───────────────────────────────────────────────────────────────────


class RawPropertyType(str, Enum):
    """Type tokens accepted in the sheet's Type column (case-insensitive)."""

    PHONE = "phone"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ENUMERATION = "enumeration"


class PropertyType(str, Enum):
    """HubSpot property data types."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"
    ENUMERATION = "enumeration"


class FieldType(str, Enum):
    """HubSpot UI field types."""

    BOOLEAN_CHECKBOX = "booleancheckbox"
    CALCULATION_EQUATION = "calculation_equation"
    CHECKBOX = "checkbox"
    DATE = "date"
    FILE = "file"
    HTML = "html"
    NUMBER = "number"
    PHONENUMBER = "phonenumber"
    RADIO = "radio"
    SELECT = "select"
    TEXT = "text"
    TEXTAREA = "textarea"


class YesNo(str, Enum):
    YES = "yes"
    NO = "no"


class AuditStatus(str, Enum):
    """Outcome recorded for one property in the run's audit artifact."""

    SUCCESS = "success"
    EXISTS = "exists"
    FAILED = "failed"


# ── Property Payloads ───────────────────────────────────────────────────────


class PropertyOption(BaseModel):
    """One enumeration choice; value is the normalized key of label."""

    label: str
    value: str


class PropertyGroup(BaseModel):
    """Property group as returned by the schema API."""

    name: str
    label: str = ""


class PropertyDescriptor(BaseModel):
    """Canonical definition of one property, mapped from a sheet row."""

    object_type: str
    group_name: str
    name: str
    label: str
    type: PropertyType
    field_type: FieldType
    options: list[PropertyOption] | None = None

    def _payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "label": self.label,
            "type": self.type.value,
            "fieldType": self.field_type.value,
            "groupName": self.group_name,
        }
        if self.options:
            payload["options"] = [o.model_dump() for o in self.options]
        return payload

    def to_create_payload(self) -> dict[str, Any]:
        """JSON body for POST /crm/v3/properties/{objectType}."""
        return {"name": self.name, **self._payload()}

    def to_update_payload(self) -> dict[str, Any]:
        """JSON body for PATCH /crm/v3/properties/{objectType}/{name}."""
        return self._payload()


# ── Run Output ──────────────────────────────────────────────────────────────


class AuditRecord(BaseModel):
    """Single appended entry in a run's audit artifact."""

    name: str
    status: AuditStatus
    error: str | None = None
    time: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_log_entry(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class SyncSummary(BaseModel):
    """Result returned to the caller once every sheet has been processed."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = "HubSpot property sync completed"
    sheets_processed: list[str] = Field(default_factory=list, alias="sheetsProcessed")
