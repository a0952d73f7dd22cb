"""
Image Host Abstract Base Class

Menu photos are stored with a third-party image host; only the returned URL
is kept in the database.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class ImageUploadResult:
    success: bool
    url: Optional[str] = None
    error_message: Optional[str] = None
    provider: str = "unknown"


class BaseImageHost(ABC):

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def upload(self, content: bytes, filename: str) -> ImageUploadResult:
        pass

    async def aclose(self) -> None:
        return None
