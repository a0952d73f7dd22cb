"""
Best-effort delivery of new-order notifications.

The order is already accepted when this runs, so nothing raised here may
reach the client.
"""

import logging
from typing import Optional

from tableorder.formatting import format_order_notification
from tableorder.receipt import OrderReceipt
from tableorder.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


async def dispatch_order_notification(
    service: BaseNotificationService,
    receipt: OrderReceipt,
    currency: str = "NT$",
) -> Optional[NotificationResult]:
    """Format and push the order summary. Returns None when nothing was sent."""
    if not service.is_configured:
        logger.info(f"Notification skipped for order #{receipt.order_id}: {service.provider_name} not configured")
        return None

    try:
        text = format_order_notification(receipt, currency=currency)
        result = await service.push_text(text)
    except Exception:
        logger.exception(f"Notification for order #{receipt.order_id} failed")
        return None

    if result.success:
        logger.info(f"Notification sent for order #{receipt.order_id} via {result.provider}")
    else:
        logger.error(
            f"Notification for order #{receipt.order_id} not delivered: {result.error_message}"
        )
    return result
