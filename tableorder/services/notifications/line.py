"""
LINE Notification Service

Production implementation pushing order summaries to a single LINE user or
group through the Messaging API.

API Documentation:
    https://developers.line.biz/en/reference/messaging-api/#send-push-message
"""

import logging
from typing import Optional

import httpx

from tableorder.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)

LINE_API_BASE = "https://api.line.me/v2/bot"
# Messaging API limit for a text message
MAX_TEXT_LENGTH = 5000


class LineNotificationService(BaseNotificationService):
    """Push notifications via the LINE Messaging API."""

    def __init__(
        self,
        channel_access_token: Optional[str],
        recipient_id: Optional[str],
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._token = channel_access_token
        self._recipient_id = recipient_id
        self._client = client or httpx.AsyncClient(base_url=LINE_API_BASE, timeout=timeout)

        if not self.is_configured:
            logger.warning("LINE credentials or recipient not configured; pushes disabled")
        else:
            logger.info("LineNotificationService initialized")

    @property
    def provider_name(self) -> str:
        return "line"

    @property
    def is_configured(self) -> bool:
        return bool(self._token and self._recipient_id)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def push_text(self, text: str) -> NotificationResult:
        """Push ``text`` to the configured recipient."""
        if not self.is_configured:
            return NotificationResult(
                success=False,
                error_message="LINE not configured",
                provider="line"
            )

        payload = {
            "to": self._recipient_id,
            "messages": [{"type": "text", "text": text[:MAX_TEXT_LENGTH]}],
        }

        try:
            response = await self._client.post("/message/push", json=payload, headers=self._headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"LINE push rejected ({e.response.status_code}): {e.response.text}")
            return NotificationResult(
                success=False,
                error_message=f"HTTP {e.response.status_code}",
                provider="line"
            )
        except httpx.HTTPError as e:
            logger.error(f"LINE push failed: {e}")
            return NotificationResult(
                success=False,
                error_message=str(e),
                provider="line"
            )

        request_id = response.headers.get("x-line-request-id")
        logger.info(f"LINE message pushed to {self._recipient_id} (request {request_id})")

        return NotificationResult(
            success=True,
            message_id=request_id,
            provider="line"
        )

    async def health_check(self) -> bool:
        if not self.is_configured:
            return False
        try:
            response = await self._client.get("/info", headers=self._headers())
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
