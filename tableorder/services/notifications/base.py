"""
Notification Service Abstract Base Class

Defines the interface for pushing staff notifications about new orders.
Supports both Mock (development) and Real (production) implementations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class NotificationResult:
    """Result from pushing a notification."""
    success: bool
    message_id: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


class BaseNotificationService(ABC):
    """Abstract base class for notification services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @property
    def is_configured(self) -> bool:
        """False when credentials or the recipient are missing; pushes are skipped."""
        return True

    @abstractmethod
    async def push_text(self, text: str) -> NotificationResult:
        """Push a plain-text message to the configured staff recipient."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check service connectivity."""
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        return None
