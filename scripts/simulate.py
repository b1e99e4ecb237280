"""
Order Rush Simulation Script

Fires a burst of concurrent random orders at a running server, then asks
for the statistics twice to confirm the daily row is upserted, not
duplicated.
Run from project root: python scripts/simulate.py
"""

import asyncio
import argparse
import random
import time
from datetime import datetime
from typing import Any

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 50

FIRST_NAMES = ["Nimal", "Kamala", "Sunil", "Chamari", "Ruwan", "Dilani", "Asanka", "Tharushi"]
LAST_NAMES = ["Perera", "Silva", "Fernando", "Jayasinghe", "Bandara", "Wijesinghe"]


def generate_order_payload(menu: dict[str, list[dict]]) -> dict[str, Any]:
    """Random order; roughly a third of orders skip dessert."""
    payload = {
        "name": f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}",
        "main_dish": random.choice(menu["main_dishes"])["id"],
        "side_dish": random.choice(menu["side_dishes"])["id"],
    }
    if menu["desserts"] and random.random() > 0.33:
        payload["dessert"] = random.choice(menu["desserts"])["id"]
    return payload


async def send_order(
    client: httpx.AsyncClient,
    menu: dict[str, list[dict]],
    order_num: int,
) -> dict[str, Any]:
    """Send one order via the JSON API."""
    payload = generate_order_payload(menu)
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/api/orders", json=payload, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data.get("order_id"),
                "total": data.get("total_price"),
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def run_simulation(num_orders: int = TOTAL_ORDERS) -> dict[str, Any]:
    print("=" * 70)
    print("ORDER RUSH SIMULATION")
    print("=" * 70)
    print(f"Total Orders: {num_orders}")
    print(f"Target: {API_BASE_URL}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        menu = (await client.get(f"{API_BASE_URL}/api/dishes")).json()
        if not menu["main_dishes"] or not menu["side_dishes"]:
            print("\nThe menu is empty; start the server with SEED_CATALOG=true")
            return {"success": 0, "failed": num_orders}

        tasks = [send_order(client, menu, i + 1) for i in range(num_orders)]
        results = await asyncio.gather(*tasks)

        # Two reads in a row must still leave one row for today
        await client.get(f"{API_BASE_URL}/api/statistics")
        statistics = (await client.get(f"{API_BASE_URL}/api/statistics")).json()

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    today = statistics["today"]
    todays_rows = [s for s in statistics["daily_statistics"] if s["date"] == today["date"]]

    print("\n" + "=" * 70)
    print("SIMULATION RESULTS")
    print("=" * 70)
    print(f"\nSuccessful Orders: {len(successful)}/{num_orders}")
    print(f"Failed Orders: {len(failed)}/{num_orders}")
    print(f"Total Time: {total_time}s")

    if successful:
        avg_time = sum(r["time"] for r in successful) / len(successful)
        print(f"Average Response: {avg_time:.3f}s")
        print(f"Revenue Placed: {sum(r['total'] for r in successful):.2f}")

    for r in failed[:5]:
        print(f"   Order {r['order_num']}: {r['error']}")

    print(f"\nToday's Revenue: {today['daily_sales_revenue']:.2f}")
    print(f"Rows for {today['date']}: {len(todays_rows)}")
    highlights = statistics["highlights"]
    print(f"Most Famous Main Dish: {highlights['most_famous_main_dish_name'] or 'N/A'}")
    print(f"Most Famous Side Dish: {highlights['most_famous_side_dish_name'] or 'N/A'}")
    print("=" * 70)

    return {"success": len(successful), "failed": len(failed), "time": total_time}


def main():
    global API_BASE_URL

    parser = argparse.ArgumentParser(description="Order rush simulation")
    parser.add_argument("--orders", "-n", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--url", "-u", type=str, default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    asyncio.run(run_simulation(num_orders=args.orders))


if __name__ == "__main__":
    main()
