"""
Notification Service Factory

Returns Mock or LINE notification service based on ENV_MODE.
"""

import logging
from functools import lru_cache

from tableorder.core.config import get_settings
from tableorder.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)
from tableorder.services.notifications.dispatch import dispatch_order_notification
from tableorder.services.notifications.line import LineNotificationService
from tableorder.services.notifications.mock import MockNotificationService

logger = logging.getLogger(__name__)


@lru_cache()
def get_notification_service() -> BaseNotificationService:
    """Get the configured notification service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Notification Service: Using MockNotificationService (development mode)")
        return MockNotificationService(failure_rate=0.05)
    else:
        logger.info(f"Notification Service: Using LineNotificationService ({settings.env_mode.value} mode)")
        return LineNotificationService(
            channel_access_token=settings.line_channel_access_token,
            recipient_id=settings.line_user_id,
            timeout=settings.http_timeout_seconds,
        )


def reset_notification_service() -> None:
    """Clear the cached service instance."""
    get_notification_service.cache_clear()


__all__ = [
    "get_notification_service",
    "reset_notification_service",
    "dispatch_order_notification",
    "BaseNotificationService",
    "NotificationResult",
    "LineNotificationService",
    "MockNotificationService",
]
