"""Seed script for development data.

Run with:  python -m ums.seed
Seeds the stub user directory, a couple of profiles and requests in each
lifecycle state through the running API.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any

import httpx

BASE_URL = "http://localhost:8000"

ADMIN_ID = "00000000-0000-0000-0000-000000000001"
MANAGER_ID = "00000000-0000-0000-0000-000000000002"
RAVI_ID = "00000000-0000-0000-0000-000000000003"
ARJUN_ID = "00000000-0000-0000-0000-000000000004"


def _headers(user_id: str, role: str) -> dict[str, str]:
    return {"Content-Type": "application/json", "X-User-Id": user_id, "X-Role": role}


ADMIN_HEADERS = _headers(ADMIN_ID, "ADMIN")
MANAGER_HEADERS = _headers(MANAGER_ID, "MANAGER")

USERS = [
    {"id": ADMIN_ID, "username": "admin", "email": "admin@ums.local", "role": "ADMIN", "army_number": None},
    {"id": MANAGER_ID, "username": "maj.singh", "email": "singh@ums.local", "role": "MANAGER", "army_number": "IC-50213"},
    {"id": RAVI_ID, "username": "sep.ravi", "email": "ravi@ums.local", "role": "USER", "army_number": "JC-81230"},
    {"id": ARJUN_ID, "username": "sep.arjun", "email": "arjun@ums.local", "role": "USER", "army_number": "JC-81231"},
]


async def _call(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    json: dict[str, Any] | None,
    headers: dict[str, str],
    label: str,
) -> dict[str, Any] | None:
    resp = await client.request(method, url, json=json, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} ({resp.json().get('detail')})")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_users(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding users ---")
    for user in USERS:
        body = {k: v for k, v in user.items() if k != "id"}
        await _call(client, "PUT", f"{BASE_URL}/admin/users/{user['id']}", body, ADMIN_HEADERS, user["username"])


async def seed_profiles(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding profiles ---")
    ravi = _headers(RAVI_ID, "USER")
    await _call(
        client,
        "PUT",
        f"{BASE_URL}/profile/personal",
        {"fullName": "Ravi Kumar", "rank": "Sepoy", "unit": "2 Rajput"},
        ravi,
        "Ravi personal details",
    )
    await _call(
        client,
        "PUT",
        f"{BASE_URL}/profile/salary",
        {"basic": 5000, "bonus": 200},
        ravi,
        "Ravi salary",
    )


async def seed_requests(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding requests ---")
    url = f"{BASE_URL}/manager/requests"

    leave = await _call(
        client,
        "POST",
        url,
        {"type": "LEAVE", "userId": RAVI_ID, "leave": {"from": "2026-11-01", "to": "2026-11-10", "kind": "annual"}},
        MANAGER_HEADERS,
        "Request: Ravi annual leave",
    )
    if leave:
        await _call(
            client,
            "POST",
            f"{BASE_URL}/admin/requests/{leave['id']}/approve",
            None,
            ADMIN_HEADERS,
            "Approved Ravi's leave",
        )

    salary = await _call(
        client,
        "POST",
        url,
        {"type": "SALARY", "userId": RAVI_ID, "salary": {"basic": 6000}},
        MANAGER_HEADERS,
        "Request: Ravi salary revision",
    )
    if salary:
        await _call(
            client,
            "POST",
            f"{BASE_URL}/admin/requests/{salary['id']}/reject",
            {"remark": "Attach the revision order"},
            ADMIN_HEADERS,
            "Rejected Ravi's salary revision",
        )

    await _call(
        client,
        "POST",
        url,
        {"type": "OUTPASS", "userId": ARJUN_ID, "outpass": {"date": "2026-10-20", "destination": "Town"}},
        MANAGER_HEADERS,
        "Request: Arjun outpass (PENDING)",
    )


async def main() -> None:
    print("=" * 60)
    print("  Army UMS - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_users(client)
        await seed_profiles(client)
        await seed_requests(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
