"""
Order Submission Workflow

    validate -> read store settings -> decide targets
             -> database (one transaction) and/or ledger
             -> notification (scheduled by the route, after the response)

Store settings decide where an accepted order goes. At least one of the
database and the ledger must be enabled, otherwise the order is rejected
before anything is written.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tableorder.core.exceptions import (
    LedgerError,
    NoPersistenceTargetError,
    PersistenceError,
    ValidationError,
)
from tableorder.models import MenuItem, Order, OrderLine, ORDER_STATUS_RECEIVED
from tableorder.receipt import OrderReceipt, ReceiptLine
from tableorder.schemas import OrderSubmission
from tableorder.services.ledger.base import BaseLedgerService
from tableorder.store_settings import StoreSettings, load_store_settings

logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_order_submission(payload: Any) -> OrderSubmission:
    """
    Check the raw request body and parse it.

    Raises:
        ValidationError: table number / headcount / subtotal missing, items
            missing, not a list or empty, or values of the wrong type
    """
    if not isinstance(payload, dict):
        raise ValidationError("Order data must be a JSON object")

    if not payload.get("tableNumber") or not payload.get("headcount"):
        raise ValidationError("Table number and headcount are required")
    if payload.get("totalAmount") is None:
        raise ValidationError("Total amount is required")

    items = payload.get("items")
    if not isinstance(items, list):
        raise ValidationError("Items must be a list")
    if not items:
        raise ValidationError("An order needs at least one item")

    try:
        return OrderSubmission.model_validate(payload)
    except SchemaValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"Invalid order data: {field}: {first['msg']}") from e


def order_total(submission: OrderSubmission) -> float:
    """Final amount is always subtotal + fee."""
    total = round(submission.subtotal + submission.fee, 2)
    if submission.final_amount is not None and abs(submission.final_amount - total) > 0.005:
        logger.warning(
            f"Client final amount {submission.final_amount} != subtotal + fee ({total}); using {total}"
        )
    return total


# =============================================================================
# SETTINGS GATE
# =============================================================================

@dataclass(frozen=True)
class PersistencePlan:
    persist_to_database: bool
    append_to_ledger: bool


def resolve_persistence_plan(settings: StoreSettings) -> PersistencePlan:
    """
    Raises:
        NoPersistenceTargetError: both targets are disabled
    """
    plan = PersistencePlan(
        persist_to_database=settings.save_orders_to_database,
        append_to_ledger=settings.save_orders_to_sheet,
    )
    if not plan.persist_to_database and not plan.append_to_ledger:
        raise NoPersistenceTargetError()
    return plan


# =============================================================================
# PERSISTENCE
# =============================================================================

async def lookup_menu_items(session: AsyncSession, ids: Iterable[Optional[int]]) -> dict[int, MenuItem]:
    wanted = {i for i in ids if i is not None}
    if not wanted:
        return {}
    result = await session.execute(select(MenuItem).where(MenuItem.id.in_(wanted)))
    return {item.id: item for item in result.scalars().all()}


async def persist_order(
    session: AsyncSession,
    submission: OrderSubmission,
    catalog: dict[int, MenuItem],
) -> Order:
    """
    Insert the order header and all its lines in one transaction.

    Line ids missing from ``catalog`` are stored as NULL.

    Raises:
        PersistenceError: anything failed; nothing was written
    """
    order = Order(
        table_number=submission.table_number,
        headcount=submission.headcount,
        subtotal=submission.subtotal,
        fee=submission.fee,
        total_amount=order_total(submission),
        status=ORDER_STATUS_RECEIVED,
        lines=[
            OrderLine(
                menu_item_id=item.menu_item_id if item.menu_item_id in catalog else None,
                quantity=item.quantity,
                notes=item.notes,
                selected_options=item.selected_options or None,
            )
            for item in submission.items
        ],
    )

    try:
        session.add(order)
        await session.commit()
        await session.refresh(order, attribute_names=["created_at"])
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Order for table {submission.table_number} rolled back")
        raise PersistenceError() from e

    logger.info(f"Order #{order.id} saved to database ({len(submission.items)} lines)")
    return order


def synthesize_order_id(now: Optional[datetime] = None) -> str:
    """Placeholder id for orders that are not written to the database."""
    now = now or datetime.now(timezone.utc)
    return f"T{now:%Y%m%d%H%M%S}{now.microsecond // 1000:03d}-{uuid.uuid4().hex[:4]}"


def build_receipt_lines(submission: OrderSubmission, catalog: dict[int, MenuItem]) -> list[ReceiptLine]:
    lines = []
    for item in submission.items:
        known = catalog.get(item.menu_item_id) if item.menu_item_id is not None else None
        lines.append(
            ReceiptLine(
                quantity=item.quantity,
                name=item.name or (known.name if known else None),
                menu_item_id=known.id if known else None,
                notes=item.notes,
                selected_options=dict(item.selected_options),
            )
        )
    return lines


# =============================================================================
# WORKFLOW
# =============================================================================

async def submit_order(
    payload: Any,
    session: AsyncSession,
    ledger: BaseLedgerService,
) -> OrderReceipt:
    """
    Accept an order.

    The ledger is awaited. A ledger failure fails the request only when the
    ledger was the sole place the order would have been recorded.

    Raises:
        ValidationError, NoPersistenceTargetError, PersistenceError, LedgerError
    """
    submission = validate_order_submission(payload)

    plan = resolve_persistence_plan(await load_store_settings(session))
    catalog = await lookup_menu_items(session, (item.menu_item_id for item in submission.items))

    if plan.persist_to_database:
        order = await persist_order(session, submission, catalog)
        order_id, created_at, final_amount = order.id, order.created_at, order.total_amount
    else:
        order_id, created_at = synthesize_order_id(), datetime.now(timezone.utc)
        final_amount = order_total(submission)
        logger.info(f"Database saving disabled; order {order_id} not stored in database")

    receipt = OrderReceipt(
        order_id=order_id,
        table_number=submission.table_number,
        headcount=submission.headcount,
        subtotal=submission.subtotal,
        fee=submission.fee,
        final_amount=final_amount,
        created_at=created_at or datetime.now(timezone.utc),
        lines=build_receipt_lines(submission, catalog),
        persisted=plan.persist_to_database,
    )

    if plan.append_to_ledger:
        try:
            await ledger.append_order(receipt)
        except LedgerError:
            if not receipt.persisted:
                raise
            logger.error(f"Order #{order_id} is in the database but missing from the ledger")

    return receipt
