"""
imgbb Image Host

API Documentation:
    https://api.imgbb.com/
"""

import logging
from typing import Optional

import httpx

from tableorder.services.images.base import BaseImageHost, ImageUploadResult

logger = logging.getLogger(__name__)

IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"


class ImgbbImageHost(BaseImageHost):

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout)
        if not self.is_configured:
            logger.warning("IMGBB_API_KEY not configured; image uploads disabled")

    @property
    def provider_name(self) -> str:
        return "imgbb"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def upload(self, content: bytes, filename: str) -> ImageUploadResult:
        try:
            response = await self._client.post(
                IMGBB_UPLOAD_URL,
                params={"key": self._api_key},
                files={"image": (filename, content)},
            )
            response.raise_for_status()
            url = response.json()["data"]["url"]
        except httpx.HTTPError as e:
            logger.error(f"imgbb upload failed: {e}")
            return ImageUploadResult(success=False, error_message=str(e), provider="imgbb")
        except (KeyError, ValueError) as e:
            logger.error(f"Unexpected imgbb response: {e}")
            return ImageUploadResult(success=False, error_message="Unexpected response", provider="imgbb")

        logger.info(f"Uploaded {filename} to imgbb: {url}")
        return ImageUploadResult(success=True, url=url, provider="imgbb")

    async def aclose(self) -> None:
        await self._client.aclose()
