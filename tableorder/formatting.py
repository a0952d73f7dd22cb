"""
Staff-facing text for accepted orders.

The option-label table maps the option keys the front end sends in
``selectedOptions`` to readable labels. Unknown categories and values are
shown as sent.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from tableorder.receipt import OrderReceipt, ReceiptLine
from tableorder.schemas import LocalizedText

UNKNOWN_ITEM_NAME = "Unknown item"

OPTION_LABELS: dict[str, dict] = {
    "spice": {
        "label": "Spice",
        "values": {"none": "Not spicy", "mild": "Mild", "medium": "Medium", "hot": "Hot"},
    },
    "sugar": {
        "label": "Sugar",
        "values": {
            "none": "No sugar",
            "light": "Light sugar",
            "half": "Half sugar",
            "less": "Less sugar",
            "regular": "Regular sugar",
        },
    },
    "ice": {
        "label": "Ice",
        "values": {"none": "No ice", "light": "Light ice", "less": "Less ice", "regular": "Regular ice", "hot": "Hot"},
    },
    "size": {
        "label": "Size",
        "values": {"small": "Small", "medium": "Medium", "large": "Large"},
    },
}

LEDGER_HEADER = [
    "Order ID",
    "Time",
    "Table",
    "Headcount",
    "Subtotal",
    "Fee",
    "Total",
    "Items",
]


def display_name(name: Optional[LocalizedText]) -> str:
    """Pick the staff-language name (zh first, then en)."""
    if isinstance(name, dict):
        return name.get("zh") or name.get("en") or next(iter(name.values()), UNKNOWN_ITEM_NAME)
    return name or UNKNOWN_ITEM_NAME


def format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"


def format_selected_options(options: dict[str, str]) -> str:
    """``{"spice": "mild", "ice": "less"}`` -> ``"Spice: Mild, Ice: Less ice"``"""
    parts = []
    for category, value in options.items():
        entry = OPTION_LABELS.get(category)
        if entry is None:
            parts.append(f"{category}: {value}")
            continue
        parts.append(f"{entry['label']}: {entry['values'].get(value, value)}")
    return ", ".join(parts)


def format_order_notification(receipt: OrderReceipt, currency: str = "NT$") -> str:
    lines = [
        f"🔔 New order! (#{receipt.order_id})",
        f"Table: {receipt.table_number}",
        f"Headcount: {receipt.headcount}",
        "-------------------",
    ]
    for line in receipt.lines:
        lines.append(f"‣ {display_name(line.name)} x {line.quantity}")
        if line.notes:
            lines.append(f"  Notes: {line.notes}")
    lines.append("-------------------")
    lines.append(f"Total: {currency} {format_amount(receipt.final_amount)}")
    return "\n".join(lines)


def format_ledger_line(line: ReceiptLine) -> str:
    text = f"{display_name(line.name)} × {line.quantity}"
    if line.selected_options:
        text += f" ({format_selected_options(line.selected_options)})"
    if line.notes:
        text += f" [Notes: {line.notes}]"
    return text


def local_now(offset_hours: int, moment: Optional[datetime] = None) -> datetime:
    """``moment`` (default: now) in the fixed ledger offset. Naive values are UTC."""
    tz = timezone(timedelta(hours=offset_hours))
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def ledger_sheet_title(offset_hours: int, moment: Optional[datetime] = None) -> str:
    """Per-day sheet name, ``YYYY-MM-DD`` in the ledger offset."""
    return local_now(offset_hours, moment).strftime("%Y-%m-%d")


def build_ledger_row(receipt: OrderReceipt, offset_hours: int) -> list:
    return [
        str(receipt.order_id),
        local_now(offset_hours, receipt.created_at).strftime("%Y-%m-%d %H:%M:%S"),
        receipt.table_number,
        receipt.headcount,
        receipt.subtotal,
        receipt.fee,
        receipt.final_amount,
        "\n".join(format_ledger_line(line) for line in receipt.lines),
    ]
