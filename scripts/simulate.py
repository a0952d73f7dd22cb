"""
Rush-Hour Simulation Script

Fires many table orders at once to exercise the database transaction and the
ledger lock under concurrency.
Run from project root: python scripts/simulate.py --orders 40

Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

API_BASE_URL = "http://localhost:8080"
TOTAL_ORDERS = 40

SAMPLE_ITEMS = [
    {"name": {"zh": "滷肉飯", "en": "Braised Pork Rice"}, "price": 45},
    {"name": {"zh": "牛肉麵", "en": "Beef Noodles"}, "price": 160},
    {"name": {"zh": "燙青菜", "en": "Blanched Greens"}, "price": 40},
    {"name": {"zh": "珍珠奶茶", "en": "Bubble Tea"}, "price": 60, "options": {"ice": "less", "sugar": "half"}},
    {"name": {"zh": "紅茶", "en": "Black Tea"}, "price": 35, "options": {"ice": "none"}},
]
NOTES = [None, None, "no cilantro", "extra spicy", "share plates"]


async def fetch_menu(client: httpx.AsyncClient) -> list[dict]:
    """Menu items from the running server, or the built-in sample if it is empty."""
    response = await client.get(f"{API_BASE_URL}/api/menu")
    response.raise_for_status()
    items = [item for group in response.json()["menu"].values() for item in group]
    return items or SAMPLE_ITEMS


def generate_order(menu: list[dict], fee_percent: float) -> dict[str, Any]:
    items = []
    subtotal = 0.0
    for entry in random.sample(menu, k=min(len(menu), random.randint(1, 4))):
        quantity = random.randint(1, 3)
        subtotal += entry["price"] * quantity
        items.append({
            "id": entry.get("id"),
            "name": entry["name"],
            "quantity": quantity,
            "notes": random.choice(NOTES),
            "selectedOptions": entry.get("options") if isinstance(entry.get("options"), dict) else {},
        })
    fee = round(subtotal * fee_percent / 100, 2)
    return {
        "tableNumber": str(random.randint(1, 20)),
        "headcount": random.randint(1, 6),
        "totalAmount": subtotal,
        "fee": fee,
        "finalAmount": subtotal + fee,
        "items": items,
    }


async def send_order(client: httpx.AsyncClient, order_num: int, payload: dict) -> dict[str, Any]:
    start_time = time.time()
    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
    except httpx.HTTPError as e:
        return {"order_num": order_num, "success": False, "error": str(e)[:100], "time": round(time.time() - start_time, 3)}

    elapsed = round(time.time() - start_time, 3)
    if response.status_code == 201:
        return {
            "order_num": order_num,
            "success": True,
            "order_id": response.json().get("orderId"),
            "total": payload["finalAmount"],
            "time": elapsed,
        }
    return {"order_num": order_num, "success": False, "error": response.text[:100], "time": elapsed}


async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 RUSH-HOUR SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()
    async with httpx.AsyncClient() as client:
        menu = await fetch_menu(client)
        settings = (await client.get(f"{API_BASE_URL}/api/settings")).json()
        fee_percent = float(settings.get("serviceFeePercent") or 0)

        payloads = [generate_order(menu, fee_percent) for _ in range(num_orders)]
        results = await asyncio.gather(
            *(send_order(client, i + 1, payload) for i, payload in enumerate(payloads))
        )
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print(f"\n✅ Accepted: {len(successful)}/{num_orders}")
    print(f"❌ Failed: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        times = [r["time"] for r in successful]
        ids = [r["order_id"] for r in successful]
        print(f"\n📈 Average Response: {round(sum(times) / len(times), 3)}s (max {max(times)}s)")
        print(f"💰 Total: {sum(r['total'] for r in successful):.2f}")
        if len(set(ids)) != len(ids):
            print("⚠️ Duplicate order ids returned!")

    if failed:
        print("\n⚠️  Failed orders (first 5):")
        for f in failed[:5]:
            print(f"   #{f['order_num']}: {f['error']}")

    print("\nNext: python scripts/verify.py to check the ledger workbook")
    return {"total": num_orders, "successful": len(successful), "failed": len(failed), "results": results}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rush-hour order simulation")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    summary = asyncio.run(run_simulation(args.orders))
    sys.exit(0 if summary["failed"] == 0 else 1)
