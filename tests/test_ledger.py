"""
Ledger services: daily sheet creation, header rows and failure handling.

USAGE:
    python -m pytest tests/test_ledger.py -v
"""

import json
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

from gspread.exceptions import GSpreadException

from tableorder.core.exceptions import LedgerError
from tableorder.formatting import LEDGER_HEADER
from tableorder.receipt import OrderReceipt, ReceiptLine
from tableorder.services.ledger import GoogleSheetsLedgerService, WorkbookLedgerService
from tableorder.services.ledger.sheets import SHEETS_SCOPES
from tests.fakes import FakeSpreadsheet, FakeWorksheet


def make_receipt(order_id=42, **overrides):
    receipt = OrderReceipt(
        order_id=order_id,
        table_number="5",
        headcount=2,
        subtotal=300,
        fee=9,
        final_amount=309,
        created_at=datetime(2024, 3, 1, 4, 30, tzinfo=timezone.utc),
        lines=[ReceiptLine(quantity=2, name={"zh": "滷肉飯", "en": "Braised Pork Rice"}, notes="less ice")],
        persisted=True,
    )
    for key, value in overrides.items():
        setattr(receipt, key, value)
    return receipt


class RacingSpreadsheet(FakeSpreadsheet):
    """Another writer creates the sheet just before our create call fails."""

    def add_worksheet(self, title, rows, cols):
        self.create_calls += 1
        self.sheets[title] = FakeWorksheet(title)
        raise GSpreadException("A sheet with that name already exists")


class TestGoogleSheetsLedger(unittest.IsolatedAsyncioTestCase):

    def ledger(self, spreadsheet):
        return GoogleSheetsLedgerService(sheet_id=None, credentials_json=None, spreadsheet=spreadsheet)

    async def test_first_order_of_the_day_creates_sheet_with_header(self):
        spreadsheet = FakeSpreadsheet()
        ledger = self.ledger(spreadsheet)

        result = await ledger.append_order(make_receipt())

        self.assertTrue(result.success)
        self.assertTrue(result.created_sheet)
        self.assertEqual(spreadsheet.create_calls, 1)
        rows = spreadsheet.sheets[result.sheet_title].rows
        self.assertEqual(rows[0], LEDGER_HEADER)
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[1][0], "42")
        self.assertEqual(rows[1][6], 309)

    async def test_second_order_reuses_the_sheet(self):
        spreadsheet = FakeSpreadsheet()
        ledger = self.ledger(spreadsheet)

        await ledger.append_order(make_receipt(41))
        result = await ledger.append_order(make_receipt(42))

        self.assertFalse(result.created_sheet)
        self.assertEqual(spreadsheet.create_calls, 1)
        rows = spreadsheet.sheets[result.sheet_title].rows
        self.assertEqual([row[0] for row in rows[1:]], ["41", "42"])
        self.assertEqual(rows.count(LEDGER_HEADER), 1)

    async def test_failed_sheet_creation_aborts_the_append(self):
        spreadsheet = FakeSpreadsheet(fail_create=True)
        ledger = self.ledger(spreadsheet)

        with self.assertRaises(LedgerError):
            await ledger.append_order(make_receipt())

        self.assertEqual(spreadsheet.sheets, {})

    async def test_failed_header_write_aborts_and_removes_the_sheet(self):
        spreadsheet = FakeSpreadsheet(fail_header=True)
        ledger = self.ledger(spreadsheet)

        with self.assertRaises(LedgerError):
            await ledger.append_order(make_receipt())

        self.assertEqual(spreadsheet.sheets, {})

        spreadsheet.fail_header = False
        result = await ledger.append_order(make_receipt())

        self.assertTrue(result.created_sheet)
        rows = spreadsheet.sheets[result.sheet_title].rows
        self.assertEqual(rows[0], LEDGER_HEADER)
        self.assertEqual(rows[1][0], "42")

    async def test_sheet_follows_order_time_not_wall_clock(self):
        spreadsheet = FakeSpreadsheet()
        ledger = self.ledger(spreadsheet)
        just_after_midnight = datetime(2024, 3, 1, 16, 5, tzinfo=timezone.utc)

        result = await ledger.append_order(make_receipt(created_at=just_after_midnight))

        self.assertEqual(result.sheet_title, "2024-03-02")
        row = spreadsheet.sheets["2024-03-02"].rows[1]
        self.assertEqual(row[1], "2024-03-02 00:05:00")

    async def test_sheet_created_concurrently_is_used(self):
        spreadsheet = RacingSpreadsheet()
        ledger = self.ledger(spreadsheet)

        result = await ledger.append_order(make_receipt())

        self.assertTrue(result.success)
        rows = spreadsheet.sheets[result.sheet_title].rows
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0][0], "42")

    async def test_opens_spreadsheet_with_service_account_credentials(self):
        key = {"type": "service_account", "client_email": "ledger@example.iam.gserviceaccount.com"}
        ledger = GoogleSheetsLedgerService(sheet_id="sheet-key", credentials_json=json.dumps(key), timeout=7)

        with patch("tableorder.services.ledger.sheets.service_account.Credentials.from_service_account_info") as from_info, \
                patch("tableorder.services.ledger.sheets.gspread.authorize") as authorize:
            client = MagicMock()
            authorize.return_value = client

            self.assertTrue(await ledger.health_check())

        from_info.assert_called_once_with(key, scopes=SHEETS_SCOPES)
        authorize.assert_called_once_with(from_info.return_value)
        client.set_timeout.assert_called_once_with(7)
        client.open_by_key.assert_called_once_with("sheet-key")

    async def test_unconfigured_ledger_skips(self):
        ledger = GoogleSheetsLedgerService(sheet_id=None, credentials_json=None)

        result = await ledger.append_order(make_receipt())

        self.assertFalse(result.success)
        self.assertTrue(result.skipped)
        self.assertFalse(await ledger.health_check())


class TestWorkbookLedger(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / "ledger.xlsx"
        self.ledger = WorkbookLedgerService(path=self.path, lock_timeout=5)

    def tearDown(self):
        self.tmp.cleanup()

    async def test_orders_share_one_daily_sheet(self):
        first = await self.ledger.append_order(make_receipt(1))
        second = await self.ledger.append_order(make_receipt(2, table_number="A3"))

        self.assertTrue(first.created_sheet)
        self.assertFalse(second.created_sheet)
        self.assertEqual(first.sheet_title, "2024-03-01")

        rows = self.ledger.read_sheet(first.sheet_title)
        self.assertEqual(len(rows), 2)
        self.assertEqual(str(rows[0]["Order ID"]), "1")
        self.assertEqual(rows[1]["Table"], "A3")
        self.assertEqual(rows[0]["Items"], "滷肉飯 × 2 [Notes: less ice]")

    async def test_missing_sheet_reads_empty(self):
        self.assertEqual(self.ledger.read_sheet("2000-01-01"), [])
        self.assertTrue(await self.ledger.health_check())
