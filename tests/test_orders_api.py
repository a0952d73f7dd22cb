"""
Order submission over HTTP.

USAGE:
    python -m pytest tests/test_orders_api.py -v
"""

from tests.api_base import ADMIN_HEADERS, ApiTestCase
from tests.fakes import RecordingLedger

from tableorder.main import app
from tableorder.services.ledger import get_ledger_service


def example_order(**overrides):
    order = {
        "tableNumber": "5",
        "headcount": 2,
        "totalAmount": 300,
        "fee": 9,
        "finalAmount": 309,
        "items": [{"id": 7, "quantity": 2, "notes": "less ice"}],
    }
    order.update(overrides)
    return order


class TestOrderSubmission(ApiTestCase):

    def test_example_order_with_both_targets(self):
        self.set_store_settings(saveOrdersToDatabase=True, saveOrdersToSheet=True)

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertIsInstance(body["orderId"], int)
        self.assertTrue(body["message"])

        order = self.client.get(f"/api/admin/orders/{body['orderId']}", headers=ADMIN_HEADERS).json()
        self.assertEqual(order["totalAmount"], 309)
        self.assertEqual(order["status"], "received")
        self.assertEqual(len(order["lines"]), 1)
        self.assertEqual(order["lines"][0]["quantity"], 2)
        self.assertEqual(order["lines"][0]["notes"], "less ice")

        self.assertEqual(len(self.ledger.rows), 1)
        sheet_title, row = self.ledger.rows[0]
        self.assertRegex(sheet_title, r"^\d{4}-\d{2}-\d{2}$")
        self.assertEqual(row[0], str(body["orderId"]))
        self.assertEqual(row[6], 309)

        self.assertEqual(self.notifier.attempts, 1)
        self.assertIn(f"#{body['orderId']}", self.notifier.pushed[0])

    def test_total_is_subtotal_plus_fee_and_line_count_matches(self):
        items = [
            {"id": 1, "quantity": 1},
            {"id": 2, "quantity": 3, "selectedOptions": {"spice": "hot"}},
            {"quantity": 1, "name": "Off-menu special"},
        ]
        response = self.client.post(
            "/api/orders",
            json=example_order(totalAmount=120.5, fee=12, finalAmount=999, items=items),
        )

        self.assertEqual(response.status_code, 201, response.text)
        order = self.client.get(f"/api/admin/orders/{response.json()['orderId']}", headers=ADMIN_HEADERS).json()
        self.assertAlmostEqual(order["totalAmount"], 132.5)
        self.assertEqual(len(order["lines"]), 3)
        self.assertEqual(order["lines"][1]["selectedOptions"], {"spice": "hot"})

    def test_fee_defaults_to_zero(self):
        payload = example_order()
        del payload["fee"]
        del payload["finalAmount"]

        response = self.client.post("/api/orders", json=payload)

        order = self.client.get(f"/api/admin/orders/{response.json()['orderId']}", headers=ADMIN_HEADERS).json()
        self.assertEqual(order["fee"], 0)
        self.assertEqual(order["totalAmount"], 300)

    def test_unknown_menu_item_is_stored_without_reference(self):
        created = self.client.post(
            "/api/admin/menu-items",
            json={"name": {"zh": "紅茶", "en": "Black Tea"}, "price": 40},
            headers=ADMIN_HEADERS,
        ).json()

        response = self.client.post(
            "/api/orders",
            json=example_order(items=[
                {"id": created["id"], "quantity": 1},
                {"id": 9999, "quantity": 1},
            ]),
        )

        order = self.client.get(f"/api/admin/orders/{response.json()['orderId']}", headers=ADMIN_HEADERS).json()
        self.assertEqual(order["lines"][0]["menuItemId"], created["id"])
        self.assertIsNone(order["lines"][1]["menuItemId"])
        self.assertIn("紅茶 x 1", self.notifier.pushed[0])

    def test_missing_required_fields_are_rejected(self):
        for field in ("tableNumber", "headcount", "totalAmount"):
            with self.subTest(field=field):
                payload = example_order()
                del payload[field]

                response = self.client.post("/api/orders", json=payload)

                self.assertEqual(response.status_code, 400)
                self.assertIn("message", response.json())

        self.assertEqual(self.list_orders()["total"], 0)
        self.assertEqual(self.notifier.attempts, 0)

    def test_items_must_be_a_non_empty_list(self):
        for items in (None, "7 x 2", {"id": 7}, []):
            with self.subTest(items=items):
                response = self.client.post("/api/orders", json=example_order(items=items))
                self.assertEqual(response.status_code, 400)

    def test_zero_subtotal_is_accepted(self):
        response = self.client.post("/api/orders", json=example_order(totalAmount=0, fee=0, finalAmount=0))
        self.assertEqual(response.status_code, 201, response.text)

    def test_no_persistence_target_is_rejected_without_side_effects(self):
        self.set_store_settings(saveOrdersToDatabase=False, saveOrdersToSheet=False)

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 400)
        self.assertIn("message", response.json())
        self.assertEqual(self.list_orders()["total"], 0)
        self.assertEqual(self.ledger.receipts, [])
        self.assertEqual(self.notifier.attempts, 0)

    def test_ledger_only_uses_placeholder_id(self):
        self.set_store_settings(saveOrdersToDatabase=False, saveOrdersToSheet=True)

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 201, response.text)
        order_id = response.json()["orderId"]
        self.assertIsInstance(order_id, str)
        self.assertTrue(order_id.startswith("T"))
        self.assertEqual(self.list_orders()["total"], 0)
        self.assertEqual(self.ledger.rows[0][1][0], order_id)
        self.assertIn(f"#{order_id}", self.notifier.pushed[0])

    def test_ledger_is_skipped_when_disabled(self):
        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.ledger.receipts, [])

    def test_non_positive_quantity_is_rejected_for_every_target(self):
        items = [{"id": 1, "quantity": 0}, {"id": 2, "quantity": -3}]
        targets = [
            {"saveOrdersToDatabase": True, "saveOrdersToSheet": True},
            {"saveOrdersToDatabase": False, "saveOrdersToSheet": True},
        ]
        for target in targets:
            with self.subTest(**target):
                self.set_store_settings(**target)

                response = self.client.post("/api/orders", json=example_order(items=items))

                self.assertEqual(response.status_code, 400)
                self.assertIn("quantity", response.json()["message"])

        self.assertEqual(self.list_orders()["total"], 0)
        self.assertEqual(self.ledger.rows, [])
        self.assertEqual(self.notifier.attempts, 0)

    def test_notification_failure_does_not_affect_the_response(self):
        self.notifier.fail = True

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.notifier.attempts, 1)

    def test_unconfigured_notifier_is_not_called(self):
        self.notifier.configured = False

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.notifier.attempts, 0)


class TestLedgerFailurePolicy(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.ledger = RecordingLedger(fail=True)
        app.dependency_overrides[get_ledger_service] = lambda: self.ledger

    def test_ledger_failure_after_database_commit_keeps_the_order(self):
        self.set_store_settings(saveOrdersToDatabase=True, saveOrdersToSheet=True)

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.list_orders()["total"], 1)

    def test_ledger_failure_as_only_target_is_a_server_error(self):
        self.set_store_settings(saveOrdersToDatabase=False, saveOrdersToSheet=True)

        response = self.client.post("/api/orders", json=example_order())

        self.assertEqual(response.status_code, 500)
        self.assertIn("message", response.json())
        self.assertEqual(self.notifier.attempts, 0)
