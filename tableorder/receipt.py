"""
Accepted-order records handed to the notification and ledger services.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from tableorder.schemas import LocalizedText


@dataclass
class ReceiptLine:
    quantity: int
    name: Optional[LocalizedText] = None
    menu_item_id: Optional[int] = None
    notes: Optional[str] = None
    selected_options: dict[str, str] = field(default_factory=dict)


@dataclass
class OrderReceipt:
    """
    An accepted order as staff see it.

    ``order_id`` is the database id, or a synthesized string when the order
    was not written to the database.
    """
    order_id: Union[int, str]
    table_number: str
    headcount: int
    subtotal: float
    fee: float
    final_amount: float
    created_at: datetime
    lines: list[ReceiptLine] = field(default_factory=list)
    persisted: bool = False
