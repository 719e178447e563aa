"""Per-run audit artifact for property sync outcomes.

Each sync run owns one AuditLog. The artifact path is resolved on the first
append and reused for the rest of the run, so every record of the run lands
in one JSON array file:

    <log_dir>/<identity>-<sheet>-<run timestamp>.log.json

Appends read the current array, add the record and rewrite the whole file.
Unparseable existing content is logged and replaced by a fresh array; a failed
write raises AuditLogError and ends the run.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from src.app.properties.schemas import AuditRecord

logger = structlog.get_logger(__name__)


class AuditLogError(Exception):
    """Raised when the audit artifact cannot be written."""


def _file_timestamp(moment: datetime) -> str:
    return moment.isoformat().replace(":", "-").replace(".", "-")


def _path_component(value: str) -> str:
    return value.replace("/", "_").replace("\\", "_")


class AuditLog:
    """Append-only JSON audit artifact for one sync run.

    Args:
        log_dir: Directory receiving the artifact (created on demand).
        started_at: Run start time embedded in the file name. Defaults to now.
    """

    def __init__(self, log_dir: str | Path, started_at: datetime | None = None) -> None:
        self._log_dir = Path(log_dir)
        self._started_at = started_at or datetime.now(timezone.utc)
        self._path: Path | None = None

    @property
    def path(self) -> Path | None:
        """Artifact path for this run, or None before the first append."""
        return self._path

    def _resolve_path(self, sheet: str, identity: str) -> Path:
        if self._path is None:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            file_name = (
                f"{_path_component(identity)}-{_path_component(sheet)}-"
                f"{_file_timestamp(self._started_at)}.log.json"
            )
            self._path = self._log_dir / file_name
        return self._path

    def _read_entries(self, path: Path) -> list[dict[str, Any]]:
        if not path.exists():
            return []
        try:
            content = path.read_text(encoding="utf-8")
            entries = json.loads(content) if content else []
        except (OSError, ValueError):
            logger.warning("audit.log_parse_error", path=str(path))
            return []
        if not isinstance(entries, list):
            logger.warning("audit.log_parse_error", path=str(path))
            return []
        return entries

    def _write(self, sheet: str, identity: str, record: AuditRecord) -> Path:
        try:
            path = self._resolve_path(sheet, identity)
        except OSError as exc:
            raise AuditLogError(f"Cannot create audit log directory {self._log_dir}: {exc}") from exc

        entries = self._read_entries(path)
        entries.append(record.to_log_entry())

        try:
            path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        except OSError as exc:
            raise AuditLogError(f"Cannot write audit log {path}: {exc}") from exc
        return path

    async def append(self, sheet: str, identity: str, record: AuditRecord) -> None:
        """Append record to this run's artifact.

        The read-modify-write runs in a worker thread. A run appends one
        record at a time, so writes to the artifact never overlap.

        Args:
            sheet: Sheet the record came from (names the file on first call).
            identity: Account identity of the run's credential.
            record: Outcome to append.

        Raises:
            AuditLogError: If the artifact cannot be written.
        """
        path = await asyncio.to_thread(self._write, sheet, identity, record)
        logger.info(
            "audit.record_appended",
            name=record.name,
            status=record.status.value,
            path=str(path),
        )
