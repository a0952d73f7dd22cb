"""
Backoff and the recommendation fallback.

USAGE:
    python -m pytest tests/test_retry.py -v
"""

import unittest
from unittest.mock import AsyncMock

from tableorder.core.exceptions import GenerationError, ServiceOverloadedError
from tableorder.core.retry import RETRY_EXHAUSTED, retry_with_backoff
from tableorder.services.recommendations import (
    CANNED_RECOMMENDATIONS,
    RecommendationService,
    build_recommendation_prompt,
    canned_recommendation,
)
from tests.fakes import ScriptedGenerator


def waits(sleep):
    return [call.args[0] for call in sleep.await_args_list]


class TestRetryWithBackoff(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.sleep = AsyncMock()
        self.calls = 0

    def flaky(self, outcomes):
        async def operation():
            outcome = outcomes[min(self.calls, len(outcomes) - 1)]
            self.calls += 1
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return operation

    async def test_succeeds_after_two_overloads(self):
        operation = self.flaky([ServiceOverloadedError(), ServiceOverloadedError(), "ok"])

        result = await retry_with_backoff(
            operation,
            is_retryable=lambda e: isinstance(e, ServiceOverloadedError),
            sleep=self.sleep,
        )

        self.assertEqual(result, "ok")
        self.assertEqual(self.calls, 3)
        self.assertEqual(waits(self.sleep), [1.0, 2.0])

    async def test_exhaustion_returns_sentinel_without_trailing_wait(self):
        operation = self.flaky([ServiceOverloadedError()])

        result = await retry_with_backoff(
            operation,
            is_retryable=lambda e: isinstance(e, ServiceOverloadedError),
            sleep=self.sleep,
        )

        self.assertIs(result, RETRY_EXHAUSTED)
        self.assertEqual(self.calls, 3)
        self.assertEqual(waits(self.sleep), [1.0, 2.0])

    async def test_other_errors_are_raised_immediately(self):
        operation = self.flaky([KeyError("bad key")])

        with self.assertRaises(KeyError):
            await retry_with_backoff(
                operation,
                is_retryable=lambda e: isinstance(e, ServiceOverloadedError),
                sleep=self.sleep,
            )

        self.assertEqual(self.calls, 1)
        self.assertEqual(waits(self.sleep), [])

    async def test_base_delay_scales_the_schedule(self):
        operation = self.flaky([ServiceOverloadedError()])

        await retry_with_backoff(
            operation,
            is_retryable=lambda e: True,
            max_attempts=4,
            base_delay=0.5,
            sleep=self.sleep,
        )

        self.assertEqual(waits(self.sleep), [0.5, 1.0, 2.0])

    async def test_rejects_zero_attempts(self):
        with self.assertRaises(ValueError):
            await retry_with_backoff(self.flaky(["ok"]), is_retryable=lambda e: True, max_attempts=0)


class TestRecommendationService(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.sleep = AsyncMock()
        self.cart = [{"name": {"zh": "牛肉麵", "en": "Beef Noodles"}, "quantity": 1}]
        self.menu = [{"name": {"zh": "珍珠奶茶", "en": "Bubble Tea"}, "price": 60}]

    async def test_returns_model_text(self):
        generator = ScriptedGenerator([ServiceOverloadedError(), "Add a bubble tea!"])
        service = RecommendationService(generator, sleep=self.sleep)

        text = await service.recommend("en", self.cart, self.menu)

        self.assertEqual(text, "Add a bubble tea!")
        self.assertEqual(generator.calls, 2)
        self.assertEqual(waits(self.sleep), [1.0])

    async def test_overload_on_every_attempt_gives_canned_text(self):
        generator = ScriptedGenerator([ServiceOverloadedError()])
        service = RecommendationService(generator, sleep=self.sleep)

        text = await service.recommend("zh", self.cart, self.menu)

        self.assertEqual(text, CANNED_RECOMMENDATIONS["zh"])
        self.assertEqual(generator.calls, 3)
        self.assertEqual(waits(self.sleep), [1.0, 2.0])

    async def test_hard_failure_is_a_generation_error(self):
        generator = ScriptedGenerator([RuntimeError("invalid api key")])
        service = RecommendationService(generator, sleep=self.sleep)

        with self.assertRaises(GenerationError):
            await service.recommend("en", self.cart, self.menu)

        self.assertEqual(generator.calls, 1)
        self.assertEqual(waits(self.sleep), [])

    def test_unknown_language_falls_back_to_english(self):
        self.assertEqual(canned_recommendation("fr"), CANNED_RECOMMENDATIONS["en"])

    def test_prompt_names_cart_and_menu(self):
        prompt = build_recommendation_prompt("zh", self.cart, self.menu)

        self.assertIn("牛肉麵", prompt)
        self.assertIn("珍珠奶茶", prompt)
        self.assertIn("Traditional Chinese", prompt)
