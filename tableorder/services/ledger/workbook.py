"""
Workbook Ledger with Concurrency Control

Development ledger kept in a local Excel workbook, one worksheet per day.
Writes are serialized with a lock file so several workers can share the file.
"""

import asyncio
import logging
from pathlib import Path

import pandas as pd
from filelock import FileLock, Timeout

from tableorder.core.exceptions import LedgerError
from tableorder.formatting import LEDGER_HEADER
from tableorder.services.ledger.base import BaseLedgerService

logger = logging.getLogger(__name__)


class WorkbookLedgerService(BaseLedgerService):
    """Process-safe Excel ledger."""

    def __init__(self, path: Path, lock_timeout: int = 30, utc_offset_hours: int = 8):
        super().__init__(utc_offset_hours=utc_offset_hours)
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout
        logger.info(f"WorkbookLedgerService initialized ({self.path})")

    @property
    def provider_name(self) -> str:
        return "workbook"

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def _load_sheets(self) -> dict[str, pd.DataFrame]:
        if not self.path.exists():
            return {}
        return pd.read_excel(self.path, sheet_name=None, engine="openpyxl", dtype=object)

    def _append_sync(self, sheet_title: str, row: list) -> bool:
        self._ensure_data_dir()

        with FileLock(str(self.lock_path), timeout=self.lock_timeout):
            sheets = self._load_sheets()

            created = sheet_title not in sheets
            if created:
                logger.info(f"Creating ledger sheet {sheet_title}")
                sheets[sheet_title] = pd.DataFrame(columns=LEDGER_HEADER)

            new_row = pd.DataFrame([row], columns=LEDGER_HEADER)
            frame = sheets[sheet_title]
            sheets[sheet_title] = new_row if frame.empty else pd.concat([frame, new_row], ignore_index=True)

            with pd.ExcelWriter(self.path, engine="openpyxl") as writer:
                for title, frame in sheets.items():
                    frame.to_excel(writer, sheet_name=title, index=False)

        return created

    async def _append_row(self, sheet_title: str, row: list) -> bool:
        try:
            return await asyncio.to_thread(self._append_sync, sheet_title, row)
        except Timeout as e:
            logger.error(f"Ledger lock timeout ({self.lock_timeout}s)")
            raise LedgerError("Ledger is busy, try again") from e
        except Exception as e:
            logger.exception(f"Error writing ledger workbook {self.path}")
            raise LedgerError() from e

    def read_sheet(self, sheet_title: str) -> list[dict]:
        """Rows of one day's sheet (empty if the sheet does not exist)."""
        sheets = self._load_sheets()
        if sheet_title not in sheets:
            return []
        return sheets[sheet_title].to_dict("records")

    async def health_check(self) -> bool:
        try:
            self._ensure_data_dir()
            return True
        except OSError:
            return False
