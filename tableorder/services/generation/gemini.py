"""
Gemini Generation Service

Production implementation calling the Google Generative Language REST API.

API Documentation:
    https://ai.google.dev/api/generate-content
"""

import logging
from typing import Optional

import httpx

from tableorder.core.exceptions import GenerationError, ServiceOverloadedError
from tableorder.services.generation.base import BaseGenerationService

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
OVERLOADED_STATUS = 503


class GeminiGenerationService(BaseGenerationService):
    """Text generation with Gemini."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        timeout: float = 10.0,
        temperature: float = 0.7,
        max_output_tokens: int = 200,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._client = client or httpx.AsyncClient(base_url=GEMINI_API_BASE, timeout=timeout)

        if not self.is_configured:
            logger.warning("GEMINI_API_KEY not configured; recommendations disabled")
        else:
            logger.info(f"GeminiGenerationService initialized (model={model})")

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def generate(self, prompt: str) -> str:
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
            },
        }

        response = await self._client.post(
            f"/models/{self.model}:generateContent",
            params={"key": self._api_key},
            json=payload,
        )

        if response.status_code == OVERLOADED_STATUS:
            raise ServiceOverloadedError(f"Gemini overloaded: {response.text[:200]}")
        response.raise_for_status()

        data = response.json()
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("Gemini returned no text") from e

        return text.strip()

    async def health_check(self) -> bool:
        if not self.is_configured:
            return False
        try:
            response = await self._client.get(f"/models/{self.model}", params={"key": self._api_key})
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
