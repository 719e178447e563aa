"""Sheet row to HubSpot property mapping.

Defines:
- RAW_TYPE_MAP: raw Type token -> (PropertyType, default FieldType)
- map_row_to_property(): Validates one sheet row and builds a PropertyDescriptor.
- parse_dropdown_options(): Splits a "Red, Blue; Green" cell into PropertyOptions.

Pure functions; no remote calls happen here. Malformed names or labels are
passed through untouched and surface later as schema API errors.
"""

from __future__ import annotations

import re

from src.app.properties.schemas import (
    COL_DROPDOWN_VALUES,
    COL_GROUP_NAME,
    COL_LABEL,
    COL_MULTIPLE,
    COL_OBJECT_TYPE,
    COL_PROPERTY_NAME,
    COL_TYPE,
    FieldType,
    PropertyDescriptor,
    PropertyOption,
    PropertyType,
    RawPropertyType,
    RawRow,
    YesNo,
)

_OPTION_SEPARATORS = re.compile(r"[,;]")
_WHITESPACE_RUN = re.compile(r"\s+")

BOOLEAN_OPTIONS: tuple[PropertyOption, ...] = (
    PropertyOption(label="True", value="true"),
    PropertyOption(label="False", value="false"),
)

# Enumeration defaults to select; a "yes" in the Multiple column switches it to checkbox.
RAW_TYPE_MAP: dict[RawPropertyType, tuple[PropertyType, FieldType]] = {
    RawPropertyType.PHONE: (PropertyType.STRING, FieldType.PHONENUMBER),
    RawPropertyType.TEXT: (PropertyType.STRING, FieldType.TEXTAREA),
    RawPropertyType.NUMBER: (PropertyType.NUMBER, FieldType.NUMBER),
    RawPropertyType.BOOLEAN: (PropertyType.BOOL, FieldType.BOOLEAN_CHECKBOX),
    RawPropertyType.DATE: (PropertyType.DATE, FieldType.DATE),
    RawPropertyType.DATETIME: (PropertyType.DATETIME, FieldType.DATE),
    RawPropertyType.ENUMERATION: (PropertyType.ENUMERATION, FieldType.SELECT),
}


class PropertyValidationError(ValueError):
    """Raised when a row's Type cell is not a recognized raw type."""


def normalize_option_value(label: str) -> str:
    """Lowercase and replace each whitespace run with a single underscore."""
    return _WHITESPACE_RUN.sub("_", label.lower())


def parse_dropdown_options(value: str | None) -> list[PropertyOption]:
    """Parse a comma/semicolon separated cell into ordered options.

    Empty tokens are dropped; order and duplicates are kept, including values
    that collide after normalization.
    """
    if not value:
        return []

    tokens = (token.strip() for token in _OPTION_SEPARATORS.split(value))
    return [
        PropertyOption(label=token, value=normalize_option_value(token))
        for token in tokens
        if token
    ]


def is_multi_select(cell: str | bool | None) -> bool:
    """Return True when the Multiple cell says "yes" (or is a native True)."""
    if isinstance(cell, bool):
        return cell
    if not cell:
        return False
    return str(cell).strip().lower() == YesNo.YES.value


def _resolve_raw_type(cell: str | bool | None) -> RawPropertyType:
    token = str(cell).lower() if cell is not None else ""
    try:
        return RawPropertyType(token)
    except ValueError:
        raise PropertyValidationError(f"Unsupported property type: {cell}") from None


def map_row_to_property(row: RawRow) -> PropertyDescriptor:
    """Map one sheet row to a PropertyDescriptor.

    Args:
        row: Dict of column name to cell value (see ROW_COLUMNS).

    Returns:
        PropertyDescriptor with type/field_type from RAW_TYPE_MAP and options
        for enumeration and boolean rows.

    Raises:
        PropertyValidationError: If the Type cell is not a known raw type.
    """
    raw_type = _resolve_raw_type(row.get(COL_TYPE))
    prop_type, field_type = RAW_TYPE_MAP[raw_type]

    options: list[PropertyOption] | None = None
    if raw_type is RawPropertyType.ENUMERATION:
        if is_multi_select(row.get(COL_MULTIPLE)):
            field_type = FieldType.CHECKBOX
        dropdown = row.get(COL_DROPDOWN_VALUES)
        options = parse_dropdown_options(str(dropdown) if dropdown else None)
    elif raw_type is RawPropertyType.BOOLEAN:
        options = list(BOOLEAN_OPTIONS)

    return PropertyDescriptor(
        object_type=str(row.get(COL_OBJECT_TYPE, "")),
        group_name=str(row.get(COL_GROUP_NAME, "")),
        name=str(row.get(COL_PROPERTY_NAME, "")),
        label=str(row.get(COL_LABEL, "")),
        type=prop_type,
        field_type=field_type,
        options=options,
    )
