"""
Mock Generation Service

Answers with a canned suggestion built from the prompt's item list, and
randomly reports overload so the retry path gets exercised in development.
"""

import asyncio
import logging
import random

from tableorder.core.exceptions import ServiceOverloadedError
from tableorder.services.generation.base import BaseGenerationService

logger = logging.getLogger(__name__)


class MockGenerationService(BaseGenerationService):
    """Mock generation service for development."""

    def __init__(self, overload_rate: float = 0.1):
        self.overload_rate = overload_rate
        logger.info(f"MockGenerationService initialized (overload_rate={overload_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def generate(self, prompt: str) -> str:
        await asyncio.sleep(random.uniform(0.05, 0.2))

        if random.random() < self.overload_rate:
            logger.warning("Mock model overloaded (simulated)")
            raise ServiceOverloadedError("Simulated overload")

        return "Our chef recommends adding a drink to go with your meal!"

    async def health_check(self) -> bool:
        return True
