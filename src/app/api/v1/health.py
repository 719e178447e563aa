"""Liveness and readiness endpoints.

HubSpot reachability depends on each caller's token, so it is not probed
here; it surfaces per property in sync results. Readiness only checks that
audit artifacts can be written.
"""

from __future__ import annotations

import os
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.app.api.deps import get_audit_log_dir
from src.app.config import get_settings

router = APIRouter(tags=["health"])


def _writable(directory: Path) -> bool:
    # The directory is created on first append, so check the nearest existing ancestor
    for candidate in (directory, *directory.parents):
        if candidate.exists():
            return candidate.is_dir() and os.access(candidate, os.W_OK)
    return False


@router.get("/health")
async def health_check():
    return {"status": "ok", "environment": get_settings().ENVIRONMENT.value}


@router.get("/health/ready")
async def readiness_check(audit_log_dir: str = Depends(get_audit_log_dir)):
    """503 when the audit log directory cannot be written."""
    if _writable(Path(audit_log_dir).resolve()):
        return {"status": "ready", "audit_log_dir": audit_log_dir}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "audit_log_dir": audit_log_dir},
    )
