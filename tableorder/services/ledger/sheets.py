"""
Google Sheets Ledger

Production ledger appending to a Google spreadsheet with a service account.
gspread is synchronous, so every call runs in a worker thread.

Requirements:
    - GOOGLE_SHEET_ID: spreadsheet key (from its URL)
    - GOOGLE_SERVICE_ACCOUNT_JSON: service account key, shared as editor on the sheet
"""

import asyncio
import json
import logging
import threading
from typing import Any, Optional

import gspread
from google.oauth2 import service_account
from gspread.exceptions import GSpreadException, WorksheetNotFound

from tableorder.core.exceptions import LedgerError
from tableorder.formatting import LEDGER_HEADER
from tableorder.services.ledger.base import BaseLedgerService

logger = logging.getLogger(__name__)

NEW_SHEET_ROWS = 1000
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsLedgerService(BaseLedgerService):
    """
    Ledger backed by a Google spreadsheet.

    Args:
        sheet_id: Spreadsheet key
        credentials_json: Service account key as a JSON string
        spreadsheet: Already opened spreadsheet (skips authentication)
    """

    def __init__(
        self,
        sheet_id: Optional[str],
        credentials_json: Optional[str],
        utc_offset_hours: int = 8,
        timeout: float = 10.0,
        spreadsheet: Any = None,
    ):
        super().__init__(utc_offset_hours=utc_offset_hours)
        self._sheet_id = sheet_id
        self._credentials_json = credentials_json
        self._timeout = timeout
        self._spreadsheet = spreadsheet
        self._open_lock = threading.Lock()

        if not self.is_configured:
            logger.warning("Google Sheets ledger not configured; ledger appends disabled")
        else:
            logger.info("GoogleSheetsLedgerService initialized")

    @property
    def provider_name(self) -> str:
        return "google_sheets"

    @property
    def is_configured(self) -> bool:
        return self._spreadsheet is not None or bool(self._sheet_id and self._credentials_json)

    def _get_spreadsheet(self):
        with self._open_lock:
            if self._spreadsheet is None:
                credentials = service_account.Credentials.from_service_account_info(
                    json.loads(self._credentials_json),
                    scopes=SHEETS_SCOPES,
                )
                client = gspread.authorize(credentials)
                client.set_timeout(self._timeout)
                self._spreadsheet = client.open_by_key(self._sheet_id)
        return self._spreadsheet

    def _create_sheet(self, spreadsheet, sheet_title: str):
        """
        Create today's sheet with its header row.

        A sheet whose header could not be written is removed again so the
        next order retries the whole creation.
        """
        try:
            worksheet = spreadsheet.add_worksheet(
                title=sheet_title,
                rows=NEW_SHEET_ROWS,
                cols=len(LEDGER_HEADER),
            )
        except GSpreadException as e:
            # Another request may have created it in the meantime
            try:
                return spreadsheet.worksheet(sheet_title)
            except WorksheetNotFound:
                logger.error(f"Could not create ledger sheet {sheet_title}: {e}")
                raise LedgerError(f"Could not create ledger sheet {sheet_title}") from e

        try:
            worksheet.append_row(LEDGER_HEADER, value_input_option="RAW")
        except Exception as e:
            logger.error(f"Could not write header of ledger sheet {sheet_title}: {e}")
            self._discard_sheet(spreadsheet, worksheet)
            raise LedgerError(f"Could not create ledger sheet {sheet_title}") from e

        logger.info(f"Created ledger sheet {sheet_title}")
        return worksheet

    def _discard_sheet(self, spreadsheet, worksheet) -> None:
        try:
            spreadsheet.del_worksheet(worksheet)
        except Exception as e:
            logger.error(f"Could not remove headerless ledger sheet {worksheet.title}: {e}")

    def _append_sync(self, sheet_title: str, row: list) -> bool:
        spreadsheet = self._get_spreadsheet()

        created = False
        try:
            worksheet = spreadsheet.worksheet(sheet_title)
        except WorksheetNotFound:
            worksheet = self._create_sheet(spreadsheet, sheet_title)
            created = True

        worksheet.append_row(row, value_input_option="USER_ENTERED")
        return created

    async def _append_row(self, sheet_title: str, row: list) -> bool:
        try:
            return await asyncio.to_thread(self._append_sync, sheet_title, row)
        except LedgerError:
            raise
        except Exception as e:
            logger.exception(f"Error appending to ledger sheet {sheet_title}")
            raise LedgerError() from e

    async def health_check(self) -> bool:
        if not self.is_configured:
            return False
        try:
            await asyncio.to_thread(self._get_spreadsheet)
            return True
        except Exception as e:
            logger.error(f"Google Sheets health check failed: {e}")
            return False
