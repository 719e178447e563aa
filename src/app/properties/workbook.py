"""Excel workbook decoding -- uploaded .xlsx bytes to named sheets of raw rows.

The first row of every sheet is the header. Each following row becomes a dict
keyed by header name, with "" for empty cells. Fully blank rows are skipped.
Numbers and dates are stringified; native booleans are kept so the Multiple
column can carry a checkbox value.
"""

from __future__ import annotations

import io
import zipfile
from datetime import date, datetime, time
from typing import Any

import structlog
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from src.app.properties.schemas import RawRow

logger = structlog.get_logger(__name__)


class WorkbookError(ValueError):
    """Raised when uploaded content cannot be read as a workbook."""


def _cell_value(value: Any) -> str | bool:
    if value is None:
        return ""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _sheet_rows(worksheet: Any) -> list[RawRow]:
    rows = worksheet.iter_rows(values_only=True)
    header = next(rows, None)
    if header is None:
        return []

    columns = [(idx, str(name)) for idx, name in enumerate(header) if name not in (None, "")]
    result: list[RawRow] = []
    for values in rows:
        if all(v is None or v == "" for v in values):
            continue
        row: RawRow = {}
        for idx, name in columns:
            row[name] = _cell_value(values[idx] if idx < len(values) else None)
        result.append(row)
    return result


def read_workbook(content: bytes) -> dict[str, list[RawRow]]:
    """Decode workbook bytes into {sheet name: rows}, in workbook sheet order.

    Raises:
        WorkbookError: If content is not a readable .xlsx workbook.
    """
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise WorkbookError(f"Unreadable workbook: {exc}") from exc

    try:
        sheets = {name: _sheet_rows(workbook[name]) for name in workbook.sheetnames}
    finally:
        workbook.close()

    logger.info(
        "workbook.decoded",
        sheets=list(sheets),
        rows=sum(len(rows) for rows in sheets.values()),
    )
    return sheets
