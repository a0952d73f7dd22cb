"""
AI upsell recommendations for the cart page.

The model is asked for one short suggestion drawn from the available items.
Overload is retried with backoff; once the retry budget is spent a canned
line is returned so the cart page never shows an error for this feature.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from tableorder.core.exceptions import GenerationError, ServiceOverloadedError
from tableorder.core.retry import RETRY_EXHAUSTED, retry_with_backoff
from tableorder.formatting import display_name
from tableorder.services.generation.base import BaseGenerationService

logger = logging.getLogger(__name__)

CANNED_RECOMMENDATIONS = {
    "zh": "今天的人氣飲品很受歡迎，要不要來一杯搭配您的餐點呢？",
    "en": "Our popular drinks go great with your meal. Why not add one?",
}


def canned_recommendation(language: str) -> str:
    return CANNED_RECOMMENDATIONS.get(language, CANNED_RECOMMENDATIONS["en"])


def is_transient_overload(error: Exception) -> bool:
    return isinstance(error, ServiceOverloadedError)


def _summarize_items(items: list[dict[str, Any]], with_quantity: bool) -> str:
    summary = []
    for item in items:
        entry = {"name": display_name(item.get("name"))}
        if with_quantity and item.get("quantity") is not None:
            entry["quantity"] = item["quantity"]
        if not with_quantity and item.get("price") is not None:
            entry["price"] = item["price"]
        summary.append(entry)
    return json.dumps(summary, ensure_ascii=False)


def build_recommendation_prompt(
    language: str,
    cart_items: list[dict[str, Any]],
    available_items: list[dict[str, Any]],
) -> str:
    reply_language = "Traditional Chinese" if language == "zh" else "English"
    return (
        "You are a friendly waiter at a restaurant.\n"
        f"The customer's cart: {_summarize_items(cart_items, with_quantity=True)}\n"
        f"Items on the menu: {_summarize_items(available_items, with_quantity=False)}\n"
        "Suggest ONE item from the menu that is not already in the cart and "
        "goes well with the order. Answer in one or two short sentences, "
        f"in {reply_language}, without markdown."
    )


class RecommendationService:
    """Builds the prompt and calls the generator with bounded retries."""

    def __init__(
        self,
        generator: BaseGenerationService,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.generator = generator
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    async def recommend(
        self,
        language: str,
        cart_items: list[dict[str, Any]],
        available_items: list[dict[str, Any]],
    ) -> str:
        """
        Returns:
            The model's suggestion, or the canned line for ``language`` when
            the model stayed overloaded for every attempt.

        Raises:
            GenerationError: any non-transient failure
        """
        prompt = build_recommendation_prompt(language, cart_items, available_items)

        try:
            result = await retry_with_backoff(
                lambda: self.generator.generate(prompt),
                is_retryable=is_transient_overload,
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                sleep=self._sleep,
            )
        except GenerationError:
            raise
        except Exception as e:
            logger.exception(f"Recommendation failed ({self.generator.provider_name})")
            raise GenerationError() from e

        if result is RETRY_EXHAUSTED:
            logger.warning("Model overloaded on every attempt; using canned recommendation")
            return canned_recommendation(language)

        return result
