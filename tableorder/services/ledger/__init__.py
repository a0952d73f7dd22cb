"""
Ledger Service Factory

Returns the local workbook ledger in development and the Google Sheets
ledger otherwise.
"""

import logging
from functools import lru_cache
from pathlib import Path

from tableorder.core.config import get_settings
from tableorder.services.ledger.base import BaseLedgerService, LedgerResult
from tableorder.services.ledger.sheets import GoogleSheetsLedgerService
from tableorder.services.ledger.workbook import WorkbookLedgerService

logger = logging.getLogger(__name__)


@lru_cache()
def get_ledger_service() -> BaseLedgerService:
    """Get the configured ledger service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Ledger Service: Using WorkbookLedgerService (development mode)")
        return WorkbookLedgerService(
            path=Path(settings.data_directory) / settings.ledger_workbook_filename,
            lock_timeout=settings.ledger_lock_timeout,
            utc_offset_hours=settings.ledger_utc_offset_hours,
        )
    else:
        logger.info(f"Ledger Service: Using GoogleSheetsLedgerService ({settings.env_mode.value} mode)")
        return GoogleSheetsLedgerService(
            sheet_id=settings.google_sheet_id,
            credentials_json=settings.google_service_account_json,
            utc_offset_hours=settings.ledger_utc_offset_hours,
            timeout=settings.http_timeout_seconds,
        )


def reset_ledger_service() -> None:
    """Clear the cached service instance."""
    get_ledger_service.cache_clear()


__all__ = [
    "get_ledger_service",
    "reset_ledger_service",
    "BaseLedgerService",
    "LedgerResult",
    "GoogleSheetsLedgerService",
    "WorkbookLedgerService",
]
