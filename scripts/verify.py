"""
Ledger Verification Script

Checks the development ledger workbook after a simulation run: one sheet per
day, the expected header, no duplicate order ids.
Run from project root: python scripts/verify.py [YYYY-MM-DD]

Version: 1.0.0
"""

import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

from tableorder.core.config import get_settings
from tableorder.formatting import LEDGER_HEADER, ledger_sheet_title


def verify_ledger(sheet_title: str) -> bool:
    settings = get_settings()
    path = Path(settings.data_directory) / settings.ledger_workbook_filename

    print("=" * 60)
    print("🔍 LEDGER VERIFICATION REPORT")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📄 File: {path}")
    print(f"📅 Sheet: {sheet_title}")
    print("=" * 60)

    if not path.exists():
        print("\n❌ Ledger workbook not found!")
        print("   Enable saveOrdersToSheet and run: python scripts/simulate.py")
        return False

    sheets = pd.read_excel(path, sheet_name=None, engine="openpyxl")
    print(f"\n📚 Sheets: {', '.join(sheets)}")

    if sheet_title not in sheets:
        print(f"\n❌ No sheet for {sheet_title}")
        return False

    df = sheets[sheet_title]
    ok = True

    if list(df.columns) != LEDGER_HEADER:
        print(f"\n⚠️ Unexpected header: {list(df.columns)}")
        ok = False
    else:
        print("\n✅ Header row matches")

    duplicates = df["Order ID"].astype(str).duplicated().sum()
    if duplicates:
        print(f"⚠️ {duplicates} duplicate order ids")
        ok = False
    else:
        print("✅ No duplicate order ids")

    mismatched = df[(df["Subtotal"] + df["Fee"] - df["Total"]).abs() > 0.01]
    if len(mismatched):
        print(f"⚠️ {len(mismatched)} rows where Total != Subtotal + Fee")
        ok = False

    print(f"\n📊 Orders: {len(df)}   💰 Total: {df['Total'].sum():.2f}")
    print("\n📋 LATEST ORDERS:")
    print("-" * 60)
    print(df[["Order ID", "Time", "Table", "Total"]].tail(5).to_string(index=False))
    print("=" * 60)
    return ok


if __name__ == "__main__":
    title = sys.argv[1] if len(sys.argv) > 1 else ledger_sheet_title(get_settings().ledger_utc_offset_hours)
    sys.exit(0 if verify_ledger(title) else 1)
