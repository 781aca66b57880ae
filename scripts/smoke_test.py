"""Smoke test for a deployed Veritas API."""

from __future__ import annotations

import os
import sys
import httpx


def main() -> int:
    base = os.getenv("VERITAS_API_BASE_URL", "http://localhost:8000")
    health = httpx.get(f"{base}/api/health", timeout=10)
    if health.status_code != 200:
        print("Health failed:", health.status_code, health.text)
        return 1

    payload = {
        "product_name": "Smoke Test Coffee",
        "supplier_name": "Smoke Supplier",
        "description": "Created by scripts/smoke_test.py",
        "claims": [{"claim_type": "organic", "description": "Certified organic beans"}],
    }
    res = httpx.post(f"{base}/api/products", json=payload, timeout=30)
    if res.status_code != 201:
        print("Submit failed:", res.status_code, res.text)
        return 1
    batch_id = res.json()["data"]["product"]["batch_id"]
    print("batch_id:", batch_id)

    res = httpx.get(f"{base}/api/verify/{batch_id}", timeout=30)
    if res.status_code != 200:
        print("Verify failed:", res.status_code, res.text, file=sys.stderr)
        return 1
    verification = res.json()["data"]["verification"]
    print("status:", verification["overall_status"])
    print("percentage:", verification["verification_percentage"])
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
