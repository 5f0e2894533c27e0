#!/usr/bin/env python3
"""Smoke test for a running API. Verifies /health, validate-daily caching, cache-stats, clear-cache.

Run with: python scripts/smoke_prod.py
Requires: API running and a seeded company/bot (scripts/dev_seed.py).
Env: API_BASE (default http://localhost:8000), SMOKE_COMPANY_ID (1), SMOKE_BOT_ID (1).
"""

import os
import sys

import requests

API_BASE = os.getenv("API_BASE", "http://localhost:8000").rstrip("/")
COMPANY_ID = int(os.getenv("SMOKE_COMPANY_ID", "1"))
BOT_ID = int(os.getenv("SMOKE_BOT_ID", "1"))
CACHE_KEY = f"{COMPANY_ID}-{BOT_ID}"


def _post(path: str, body: dict | None = None) -> requests.Response:
    return requests.post(f"{API_BASE}{path}", json=body, timeout=30)


def _ok(resp: requests.Response) -> bool:
    return resp.status_code == 200


def main() -> int:
    failures: list[str] = []
    ids = {"companyId": COMPANY_ID, "botId": BOT_ID}

    # 1. GET /health => ok true
    print("1. GET /health ...")
    try:
        r = requests.get(f"{API_BASE}/health", timeout=10)
        if not _ok(r) or not r.json().get("ok"):
            failures.append(f"/health => {r.status_code}")
        else:
            print("   ok")
    except requests.RequestException as e:
        print(f"   FAIL: {e}")
        return 1

    # 2. Clear this key so the next call is a guaranteed miss
    print(f"2. POST /subscription/clear-cache {CACHE_KEY} ...")
    r = _post("/subscription/clear-cache", ids)
    if not _ok(r):
        failures.append(f"clear-cache => {r.status_code}")
    print(f"   {r.status_code}")

    # 3. First validate => computed, cached false
    print("3. POST /subscription/validate-daily (miss) ...")
    r = _post("/subscription/validate-daily", ids)
    if not _ok(r):
        failures.append(f"validate-daily => {r.status_code} {r.text[:200]}")
        print("\nFAILURES:", failures)
        return 1
    first = r.json()
    if first.get("cached") is not False:
        failures.append("validate-daily miss => cached not False")
    print(f"   isValid={first.get('isValid')} reason={first.get('reason')}")

    # 4. Second validate => served from cache with cacheAge
    print("4. POST /subscription/validate-daily (hit) ...")
    r = _post("/subscription/validate-daily", ids)
    second = r.json() if _ok(r) else {}
    if second.get("cached") is not True or "cacheAge" not in second:
        failures.append("validate-daily hit => not served from cache")
    if second.get("isValid") != first.get("isValid"):
        failures.append("validate-daily hit => verdict changed within TTL")
    print(f"   cached={second.get('cached')} cacheAge={second.get('cacheAge')}")

    # 5. cache-stats lists the key
    print("5. GET /subscription/cache-stats ...")
    r = requests.get(f"{API_BASE}/subscription/cache-stats", timeout=10)
    if not _ok(r) or CACHE_KEY not in r.json().get("cacheKeys", []):
        failures.append(f"cache-stats missing {CACHE_KEY}")
    else:
        print("   ok")

    # 6. Unknown company => 404
    print("6. POST /subscription/validate-daily unknown company ...")
    r = _post("/subscription/validate-daily", {"companyId": 999999999, "botId": BOT_ID})
    if r.status_code != 404:
        failures.append(f"unknown company => {r.status_code}")
    print(f"   {r.status_code}")

    if failures:
        print("\nFAILURES:", failures)
        return 1
    print("\nSmoke passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
