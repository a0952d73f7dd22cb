"""
Generation Service Factory

Returns Mock or Gemini generation service based on ENV_MODE.
"""

import logging
from functools import lru_cache

from tableorder.core.config import get_settings
from tableorder.services.generation.base import BaseGenerationService
from tableorder.services.generation.gemini import GeminiGenerationService
from tableorder.services.generation.mock import MockGenerationService

logger = logging.getLogger(__name__)


@lru_cache()
def get_generation_service() -> BaseGenerationService:
    """Get the configured generation service."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Generation Service: Using MockGenerationService (development mode)")
        return MockGenerationService(overload_rate=0.1)
    else:
        logger.info(f"Generation Service: Using GeminiGenerationService ({settings.env_mode.value} mode)")
        return GeminiGenerationService(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout=settings.http_timeout_seconds,
        )


def reset_generation_service() -> None:
    """Clear the cached service instance."""
    get_generation_service.cache_clear()


__all__ = [
    "get_generation_service",
    "reset_generation_service",
    "BaseGenerationService",
    "GeminiGenerationService",
    "MockGenerationService",
]
