"""API tests for verification endpoints."""

from veritas.api.deps import get_ledger
from veritas.api.main import app
from veritas.services.ledger import StubLedgerClient

PAYLOAD = {
    "product_name": "Organic Coffee",
    "supplier_name": "Highland Coffee Cooperative",
    "claims": [
        {"claim_type": "organic", "description": "USDA organic certified"},
        {"claim_type": "fair-trade", "description": "Fair trade certified"},
    ],
}


def _submit(client):
    return client.post("/api/products", json=PAYLOAD).json()["data"]


def test_verify_product(client):
    data = _submit(client)
    res = client.get(f"/api/verify/{data['product']['batch_id']}")
    assert res.status_code == 200

    report = res.json()["data"]
    assert report["verification"]["overall_status"] == "verified"
    assert report["verification"]["verification_percentage"] == 100
    assert len(report["ledger_verifications"]) == 2
    assert all(p["links"]["explorer"].startswith("https://hashscan.io/testnet/") for p in report["proof_links"])


class HalfLedger(StubLedgerClient):
    """Confirms only the first notarized claim (sequence 2; the product is 1)."""

    async def confirm(self, transaction_id):
        if transaction_id.endswith(".000000002"):
            return await super().confirm(transaction_id)
        return await super().confirm("unverified")


def test_verify_partial(client):
    data = _submit(client)
    app.dependency_overrides[get_ledger] = lambda: HalfLedger()

    report = client.get(f"/api/verify/{data['product']['batch_id']}").json()["data"]
    v = report["verification"]
    assert v["overall_status"] == "partially_verified"
    assert v["verified_claims"] == 1
    assert v["verification_percentage"] == 50


def test_verify_unknown_batch_is_404(client):
    res = client.get("/api/verify/COFFEE-2024-1001")
    assert res.status_code == 404
    assert res.json()["error"]["details"] == {"batch_id": "COFFEE-2024-1001"}


def test_verify_single_claim(client):
    data = _submit(client)
    batch_id = data["product"]["batch_id"]
    claim_id = data["claims"][0]["id"]

    res = client.get(f"/api/verify/{batch_id}/claims/{claim_id}")
    assert res.status_code == 200
    body = res.json()["data"]
    assert body["claim"]["id"] == claim_id
    assert body["proof_links"]["claim_id"] == claim_id

    res = client.get(f"/api/verify/{batch_id}/claims/missing")
    assert res.status_code == 404
    assert res.json()["error"]["message"] == "Claim not found for this product"


def test_verify_transaction(client):
    res = client.get("/api/verify/transaction/0.0.12345@1640995200.123456789")
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["verification"]["verified"] is True
    assert data["verification"]["consensus_timestamp"] == "1640995200.123456789"
    assert data["proof_links"]["transaction"].endswith("/api/v1/transactions/0.0.12345@1640995200.123456789")
    assert data["proof_links"]["explorer_topic"] == "https://hashscan.io/testnet/topic/0.0.6535283"


def test_verify_transaction_rejects_bad_format(client):
    res = client.get("/api/verify/transaction/not-a-transaction")
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["message"] == "Invalid transaction ID format"
    assert error["details"]["expected_format"] == "0.0.12345@1640995200.123456789"
