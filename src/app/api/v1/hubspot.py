"""REST API endpoint for syncing HubSpot properties from an Excel upload.

The upload is decoded into sheets of rows, then every row is mapped and
reconciled against the account behind the token header (HUBSPOT_TOKEN_HEADER,
``x-hubspot-api-key`` by default). The workbook is decoded in a worker thread.
Token format is enforced upstream by HubSpotTokenMiddleware.

Per-property remote failures do not fail the request; they are recorded in
the run's audit artifact. Undecodable workbooks and rows with an unsupported
Type are rejected with 400.
"""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from src.app.api.deps import get_adapter_factory, get_audit_log_dir, get_hubspot_token
from src.app.properties.audit import AuditLogError
from src.app.properties.mapper import PropertyValidationError
from src.app.properties.schemas import SyncSummary
from src.app.properties.service import AdapterFactory, run_property_sync
from src.app.properties.workbook import WorkbookError, read_workbook

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/hubspot", tags=["hubspot"])


@router.post(
    "/properties/create-from-excel",
    response_model=SyncSummary,
    response_model_by_alias=True,
)
async def create_properties_from_excel(
    file: UploadFile | None = File(default=None),
    token: str | None = Depends(get_hubspot_token),
    adapter_factory: AdapterFactory = Depends(get_adapter_factory),
    log_dir: str = Depends(get_audit_log_dir),
) -> SyncSummary:
    """Create or update HubSpot properties described by an Excel workbook.

    One sheet per object type, one row per property, with columns Object Type,
    Group Name, Property Name, Label, Type, Field Type, Dropdown Values and
    Multiple.
    """
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Excel file is required",
        )
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="HubSpot API key header is required",
        )

    content = await file.read()

    try:
        sheets = await asyncio.to_thread(read_workbook, content)
        summary = await run_property_sync(
            sheets,
            token,
            adapter_factory=adapter_factory,
            log_dir=log_dir,
        )
    except (WorkbookError, PropertyValidationError) as exc:
        logger.warning("hubspot.upload_rejected", filename=file.filename, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Failed to process Excel file: {exc}",
        ) from exc
    except AuditLogError as exc:
        logger.error("hubspot.audit_log_failed", filename=file.filename, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc

    return summary
