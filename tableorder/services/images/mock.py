"""
Mock Image Host

Pretends to upload and returns a placeholder URL.
"""

import logging
import uuid

from tableorder.services.images.base import BaseImageHost, ImageUploadResult

logger = logging.getLogger(__name__)


class MockImageHost(BaseImageHost):

    @property
    def provider_name(self) -> str:
        return "mock"

    async def upload(self, content: bytes, filename: str) -> ImageUploadResult:
        url = f"https://images.example.invalid/{uuid.uuid4().hex[:12]}/{filename}"
        logger.info(f"Mock upload of {filename} ({len(content)} bytes): {url}")
        return ImageUploadResult(success=True, url=url, provider="mock")
