"""
Billing Load Simulation Script

Logs into a POS account and fires concurrent orders built from its menu,
the way several billing counters would during a rush.
Run from project root: python scripts/simulate.py --mobile 9876543210 --pin 12345678
"""

import argparse
import asyncio
import os
import random
import sys
import time
from datetime import datetime
from typing import Any

import httpx

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from restopos.services.cart import Cart

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50
PAYMENT_METHODS = ["cash", "upi", "card"]

# Used when the account has no menu yet
FALLBACK_MENU = [
    {"id": "masala-dosa", "name": "Masala Dosa", "price": 90},
    {"id": "idli-sambar", "name": "Idli Sambar", "price": 60},
    {"id": "paneer-tikka", "name": "Paneer Tikka", "price": 240},
    {"id": "veg-biryani", "name": "Veg Biryani", "price": 180},
    {"id": "filter-coffee", "name": "Filter Coffee", "price": 30},
    {"id": "gulab-jamun", "name": "Gulab Jamun", "price": 50},
]


def generate_cart(menu: list[dict]) -> Cart:
    """Random cart of 1-4 distinct menu items, each tapped 1-3 times."""
    cart = Cart()
    for item in random.sample(menu, k=min(len(menu), random.randint(1, 4))):
        for _ in range(random.randint(1, 3)):
            cart.add(item)
    return cart


async def login(client: httpx.AsyncClient, mobile: str, pin: str) -> str:
    response = await client.post(
        f"{API_BASE_URL}/api/auth/pos/login",
        json={"mobile_number": mobile, "pin": pin},
    )
    body = response.json()
    if not body.get("success"):
        raise SystemExit(f"❌ Login failed: {body.get('message')}")
    return body["data"]["token"]


async def load_menu(client: httpx.AsyncClient) -> list[dict]:
    response = await client.get(f"{API_BASE_URL}/api/menu/items")
    items = response.json().get("data") or []
    return items or FALLBACK_MENU


async def send_order(
    client: httpx.AsyncClient,
    menu: list[dict],
    order_num: int,
    run_id: str,
) -> dict[str, Any]:
    """Record one order and time it."""
    cart = generate_cart(menu)
    payload = {
        "items": cart.to_order_lines(),
        "payment_method": random.choice(PAYMENT_METHODS),
        # Explicit numbers: concurrent counters must not race for the daily sequence
        "order_number": f"SIM-{run_id}-{order_num:04d}",
        "total_amount": cart.total,
    }
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
    except httpx.HTTPError as e:
        return {"order_num": order_num, "success": False, "error": str(e)[:100],
                "time": round(time.time() - start_time, 3)}

    elapsed = round(time.time() - start_time, 3)
    body = response.json()
    if response.status_code == 201 and body.get("success"):
        return {
            "order_num": order_num,
            "success": True,
            "order_number": body["data"]["order_number"],
            "total": body["data"]["total_amount"],
            "time": elapsed,
        }
    return {"order_num": order_num, "success": False, "error": body.get("message", response.text[:100]),
            "time": elapsed}


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(mobile: str, pin: str, num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 BILLING RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    run_id = datetime.now().strftime("%H%M%S")
    start_time = time.time()

    async with httpx.AsyncClient() as client:
        token = await login(client, mobile, pin)
        client.headers["Authorization"] = f"Bearer {token}"
        menu = await load_menu(client)
        print(f"\n🍽️  Menu items available: {len(menu)}")
        print("\n🚀 Firing orders...\n")

        results = await asyncio.gather(
            *[send_order(client, menu, i + 1, run_id) for i in range(num_orders)]
        )

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        times = [r["time"] for r in successful]
        print(f"\n📈 Performance Metrics:")
        print(f"   Average Response: {round(sum(times) / len(times), 3)}s")
        print(f"   Fastest: {min(times)}s")
        print(f"   Slowest: {max(times)}s")
        print(f"   💰 Total Revenue: ₹{sum(r['total'] for r in successful):.2f}")

    if failed:
        print(f"\n⚠️  Failed Order Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("🔍 VERIFICATION STEPS")
    print("=" * 70)
    print("1. Check Celery terminal - all export tasks should complete")
    print("2. Run: python scripts/verify.py")
    print("=" * 70)

    return {"total": num_orders, "successful": len(successful), "failed": len(failed),
            "total_time": total_time, "results": results}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Billing rush simulation")
    parser.add_argument("--mobile", required=True, help="POS account mobile number")
    parser.add_argument("--pin", required=True, help="POS account PIN")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run_simulation(args.mobile, args.pin, args.orders))
