"""
Image Host Factory
"""

import logging
from functools import lru_cache

from tableorder.core.config import get_settings
from tableorder.services.images.base import BaseImageHost, ImageUploadResult
from tableorder.services.images.imgbb import ImgbbImageHost
from tableorder.services.images.mock import MockImageHost

logger = logging.getLogger(__name__)


@lru_cache()
def get_image_host() -> BaseImageHost:
    """Get the configured image host."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Image Host: Using MockImageHost (development mode)")
        return MockImageHost()
    else:
        logger.info(f"Image Host: Using ImgbbImageHost ({settings.env_mode.value} mode)")
        return ImgbbImageHost(api_key=settings.imgbb_api_key, timeout=settings.http_timeout_seconds)


def reset_image_host() -> None:
    get_image_host.cache_clear()


__all__ = [
    "get_image_host",
    "reset_image_host",
    "BaseImageHost",
    "ImageUploadResult",
    "ImgbbImageHost",
    "MockImageHost",
]
