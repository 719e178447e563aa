"""Property sync run orchestration.

run_property_sync() drives one run end to end: it builds the run's adapter,
resolves the account identity once, creates a fresh AuditLog and
PropertySyncEngine, then walks sheets in dataset order and rows in row order,
mapping each row and reconciling it. Rows are processed strictly one after
another because the engine's cache is not safe for concurrent population.

A row that fails mapping raises PropertyValidationError to the caller (rows
already reconciled stay reconciled). Remote failures never escape: the engine
records them and moves on.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Mapping, Sequence

import structlog

from src.app.config import Settings, get_settings
from src.app.properties.audit import AuditLog
from src.app.properties.crm.adapter import PropertySchemaAdapter, SchemaClientError
from src.app.properties.crm.hubspot import HubSpotSchemaAdapter
from src.app.properties.engine import PropertySyncEngine
from src.app.properties.mapper import map_row_to_property
from src.app.properties.schemas import RawRow, SyncSummary

logger = structlog.get_logger(__name__)

AdapterFactory = Callable[[str], PropertySchemaAdapter]


def hubspot_adapter_factory(settings: Settings | None = None) -> AdapterFactory:
    """Return a factory building a HubSpotSchemaAdapter for a given token."""
    settings = settings or get_settings()

    def build(token: str) -> PropertySchemaAdapter:
        return HubSpotSchemaAdapter(
            token,
            base_url=settings.HUBSPOT_API_BASE_URL,
            timeout=settings.HUBSPOT_TIMEOUT,
        )

    return build


def token_fingerprint(token: str) -> str:
    """Short non-reversible token id used when the account lookup fails."""
    return "token-" + hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]


async def resolve_identity(adapter: PropertySchemaAdapter, token: str) -> str:
    """Account identity for audit naming, falling back to a token fingerprint."""
    try:
        return await adapter.get_account_identity()
    except SchemaClientError as exc:
        fallback = token_fingerprint(token)
        logger.warning("sync.identity_lookup_failed", error=str(exc), fallback=fallback)
        return fallback


async def run_property_sync(
    sheets: Mapping[str, Sequence[RawRow]],
    token: str,
    adapter_factory: AdapterFactory | None = None,
    log_dir: str | None = None,
) -> SyncSummary:
    """Reconcile every row of every sheet against the token's account.

    Args:
        sheets: Sheet name -> rows, iterated in mapping order.
        token: Credential for the remote schema API.
        adapter_factory: Builds the run's adapter from the token. Defaults to HubSpot.
        log_dir: Audit artifact directory. Defaults to settings.AUDIT_LOG_DIR.

    Returns:
        SyncSummary listing every processed sheet, even if properties failed.

    Raises:
        PropertyValidationError: If a row has an unsupported Type.
        AuditLogError: If the audit artifact cannot be written.
    """
    factory = adapter_factory or hubspot_adapter_factory()
    adapter = factory(token)
    identity = await resolve_identity(adapter, token)

    audit_log = AuditLog(log_dir or get_settings().AUDIT_LOG_DIR)
    engine = PropertySyncEngine(adapter, audit_log, identity)

    processed: list[str] = []
    for sheet_name, rows in sheets.items():
        logger.info("sync.sheet_start", sheet=sheet_name, rows=len(rows))
        for row in rows:
            descriptor = map_row_to_property(row)
            await engine.reconcile(descriptor, sheet_name)
        processed.append(sheet_name)

    logger.info(
        "sync.run_complete",
        identity=identity,
        sheets=processed,
        audit_log=str(audit_log.path) if audit_log.path else None,
    )
    return SyncSummary(sheets_processed=processed)
