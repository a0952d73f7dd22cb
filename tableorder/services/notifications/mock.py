"""
Mock Notification Service

Simulates LINE pushes for development.
No actual messages are sent - just logged.
"""

import asyncio
import logging
import random
import uuid

from tableorder.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


class MockNotificationService(BaseNotificationService):
    """Mock notification service for development."""

    def __init__(self, failure_rate: float = 0.05):
        self.failure_rate = failure_rate
        self.sent: list[str] = []
        logger.info(f"MockNotificationService initialized (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _simulate_latency(self) -> None:
        """Simulate network latency."""
        await asyncio.sleep(random.uniform(0.05, 0.2))

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def push_text(self, text: str) -> NotificationResult:
        """Simulate a push to the staff account."""
        await self._simulate_latency()

        if self._should_fail():
            logger.warning("Mock push failed (simulated)")
            return NotificationResult(
                success=False,
                error_message="Simulated push failure",
                provider="mock"
            )

        message_id = f"push_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append(text)
        logger.info(f"Mock push sent (ID: {message_id}):\n{text}")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    async def health_check(self) -> bool:
        """Mock always returns healthy."""
        return True
