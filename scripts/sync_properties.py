#!/usr/bin/env python3
"""CLI script to sync HubSpot properties from a local Excel workbook.

Usage:
    uv run python scripts/sync_properties.py --file properties.xlsx --token pat-na1-...
    HUBSPOT_TOKEN=pat-na1-... uv run python scripts/sync_properties.py --file properties.xlsx

Runs the same reconciliation as the upload endpoint: one sheet per object
type, one row per property. Prints the run summary as JSON. Per-property
outcomes are written to the audit log directory (AUDIT_LOG_DIR).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys

# Ensure project root is on sys.path so we can import src.app
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def sync(path: str, token: str, log_dir: str | None) -> int:
    """Decode the workbook and run the sync. Returns the process exit code."""
    from src.app.api.middleware.hubspot_token import validate_token
    from src.app.api.middleware.logging import configure_structlog
    from src.app.config import get_settings
    from src.app.properties import (
        AuditLogError,
        PropertyValidationError,
        WorkbookError,
        read_workbook,
        run_property_sync,
    )

    configure_structlog()

    reason = validate_token(token, get_settings())
    if reason:
        print(reason, file=sys.stderr)
        return 2

    with open(path, "rb") as f:
        content = f.read()

    try:
        sheets = read_workbook(content)
        summary = await run_property_sync(sheets, token, log_dir=log_dir)
    except (WorkbookError, PropertyValidationError, AuditLogError) as exc:
        print(f"Failed to process Excel file: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary.model_dump(by_alias=True), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Sync HubSpot properties from an Excel workbook")
    parser.add_argument("--file", required=True, help="Path to the .xlsx workbook")
    parser.add_argument(
        "--token",
        default=os.environ.get("HUBSPOT_TOKEN"),
        help="HubSpot private app token (defaults to $HUBSPOT_TOKEN)",
    )
    parser.add_argument("--log-dir", default=None, help="Audit log directory (defaults to AUDIT_LOG_DIR)")
    args = parser.parse_args()

    if not args.token:
        parser.error("--token or HUBSPOT_TOKEN is required")
    if not os.path.isfile(args.file):
        parser.error(f"workbook not found: {args.file}")

    sys.exit(asyncio.run(sync(args.file, args.token, args.log_dir)))


if __name__ == "__main__":
    main()
