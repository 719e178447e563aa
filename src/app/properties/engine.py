"""Property reconciliation engine -- create-or-update against the remote schema.

For every mapped property the engine:
1. Ensures the property group exists (live group listing on every call, since
   a group may have been created earlier in the run or out of band).
2. Checks existence through the run's PropertyCache, loading an object type's
   full property list once on first reference.
3. Updates the property if present, otherwise creates it and records the new
   name in the cache.
4. Appends a success record to the run's AuditLog.

Any exception raised by steps 1-3 is caught, recorded as a failed audit entry
with the error message, and swallowed so the run continues with the next row.
Successes are never rolled back. AuditLogError from the audit log itself is
not caught and ends the run.

One engine serves one run: its cache and audit log must not be shared.
"""

from __future__ import annotations

import structlog

from src.app.core.monitoring import property_sync_total
from src.app.properties.audit import AuditLog
from src.app.properties.cache import PropertyCache
from src.app.properties.crm.adapter import PropertySchemaAdapter
from src.app.properties.schemas import AuditRecord, AuditStatus, PropertyDescriptor

logger = structlog.get_logger(__name__)


class PropertySyncEngine:
    """Reconciles property descriptors against one account's schema.

    Args:
        adapter: Schema adapter bound to the run's credential.
        audit_log: The run's audit artifact.
        identity: Account identity used to name the audit artifact.
        cache: Optional pre-built cache; a fresh one is created by default.
    """

    def __init__(
        self,
        adapter: PropertySchemaAdapter,
        audit_log: AuditLog,
        identity: str,
        cache: PropertyCache | None = None,
    ) -> None:
        self._adapter = adapter
        self._audit_log = audit_log
        self._identity = identity
        self._cache = cache if cache is not None else PropertyCache()

    @property
    def cache(self) -> PropertyCache:
        return self._cache

    async def ensure_group(self, object_type: str, group_name: str) -> bool:
        """Create group_name under object_type if missing.

        Returns:
            True if the group was created, False if it already existed.
        """
        groups = await self._adapter.list_groups(object_type)
        if any(group.name == group_name for group in groups):
            logger.debug("sync.group_exists", object_type=object_type, group_name=group_name)
            return False

        await self._adapter.create_group(object_type, group_name)
        logger.info("sync.group_created", object_type=object_type, group_name=group_name)
        return True

    async def property_exists(self, object_type: str, name: str) -> bool:
        """Check the run cache, populating it from the remote list on first use."""
        return await self._cache.contains(object_type, name, self._adapter.list_properties)

    async def reconcile(self, descriptor: PropertyDescriptor, sheet_name: str) -> AuditRecord:
        """Create or update one property and record the outcome.

        Args:
            descriptor: Mapped property definition.
            sheet_name: Sheet the descriptor came from (names the audit artifact).

        Returns:
            The AuditRecord appended for this property.
        """
        object_type = descriptor.object_type
        logger.debug("sync.reconcile_start", object_type=object_type, name=descriptor.name)

        try:
            await self.ensure_group(object_type, descriptor.group_name)

            if await self.property_exists(object_type, descriptor.name):
                await self._adapter.update_property(descriptor.name, descriptor)
                outcome = "updated"
            else:
                await self._adapter.create_property(descriptor)
                self._cache.add(object_type, descriptor.name)
                outcome = "created"

            record = AuditRecord(name=descriptor.name, status=AuditStatus.SUCCESS)
            logger.info(
                "sync.property_reconciled",
                object_type=object_type,
                name=descriptor.name,
                outcome=outcome,
            )

        except Exception as exc:
            outcome = "failed"
            record = AuditRecord(
                name=descriptor.name,
                status=AuditStatus.FAILED,
                error=str(exc),
            )
            logger.error(
                "sync.property_failed",
                object_type=object_type,
                name=descriptor.name,
                error=str(exc),
            )

        property_sync_total.labels(object_type=object_type, outcome=outcome).inc()
        await self._audit_log.append(sheet_name, self._identity, record)
        return record
