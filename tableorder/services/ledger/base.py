"""
Ledger Service Abstract Base Class

The ledger is a human-readable order log kept in a spreadsheet, one sheet per
day (``YYYY-MM-DD`` in the store's fixed UTC offset). The first order of a day
creates the sheet and its header row.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from tableorder.formatting import build_ledger_row, ledger_sheet_title
from tableorder.receipt import OrderReceipt

logger = logging.getLogger(__name__)


@dataclass
class LedgerResult:
    """Result from appending an order to the ledger."""
    success: bool
    sheet_title: Optional[str] = None
    created_sheet: bool = False
    skipped: bool = False
    provider: str = "unknown"


class BaseLedgerService(ABC):
    """Abstract base class for ledger services."""

    def __init__(self, utc_offset_hours: int = 8):
        self.utc_offset_hours = utc_offset_hours

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def _append_row(self, sheet_title: str, row: list) -> bool:
        """
        Append ``row`` to ``sheet_title``, creating the sheet with the header
        row first if it does not exist.

        Returns:
            True if the sheet was created by this call

        Raises:
            LedgerError: sheet could not be created or the row not written
        """

    async def append_order(self, receipt: OrderReceipt) -> LedgerResult:
        """
        Record ``receipt`` on the sheet of the day it was created.

        An unconfigured ledger is a logged no-op. Failures raise ``LedgerError``.
        """
        if not self.is_configured:
            logger.warning(f"Ledger ({self.provider_name}) not configured; order #{receipt.order_id} not logged")
            return LedgerResult(success=False, skipped=True, provider=self.provider_name)

        title = ledger_sheet_title(self.utc_offset_hours, receipt.created_at)
        row = build_ledger_row(receipt, self.utc_offset_hours)

        created = await self._append_row(title, row)

        logger.info(f"Order #{receipt.order_id} appended to ledger sheet {title}")
        return LedgerResult(
            success=True,
            sheet_title=title,
            created_sheet=created,
            provider=self.provider_name,
        )

    @abstractmethod
    async def health_check(self) -> bool:
        pass
