"""
Cart-page recommendation endpoint.

USAGE:
    python -m pytest tests/test_recommendation_api.py -v
"""

from tableorder.core.exceptions import ServiceOverloadedError
from tableorder.services.recommendations import CANNED_RECOMMENDATIONS
from tests.api_base import ApiTestCase

REQUEST = {
    "language": "en",
    "cartItems": [{"name": {"zh": "牛肉麵", "en": "Beef Noodles"}, "quantity": 1}],
    "availableItems": [{"name": {"zh": "珍珠奶茶", "en": "Bubble Tea"}, "price": 60}],
}


class TestRecommendationEndpoint(ApiTestCase):

    def test_returns_model_suggestion(self):
        response = self.client.post("/api/recommendation", json=REQUEST)

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json(), {"recommendation": "Try the mango pudding!"})
        self.assertIn("珍珠奶茶", self.generator.prompts[0])

    def test_persistent_overload_returns_canned_text(self):
        self.generator.outcomes = [ServiceOverloadedError()]

        response = self.client.post("/api/recommendation", json=REQUEST)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["recommendation"], CANNED_RECOMMENDATIONS["en"])
        self.assertEqual(self.generator.calls, 3)

    def test_hard_failure_is_a_server_error(self):
        self.generator.outcomes = [RuntimeError("API key rejected")]

        response = self.client.post("/api/recommendation", json=REQUEST)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(set(response.json()), {"message"})
        self.assertEqual(self.generator.calls, 1)

    def test_unconfigured_generator(self):
        self.generator.configured = False

        response = self.client.post("/api/recommendation", json=REQUEST)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(self.generator.calls, 0)

    def test_disabled_in_store_settings(self):
        self.set_store_settings(aiRecommendationsEnabled=False)

        response = self.client.post("/api/recommendation", json=REQUEST)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(self.generator.calls, 0)
