import httpx
from fastapi.testclient import TestClient

from veritas.api import main as main_mod
from veritas.api.main import app
from veritas.db.engine import DBPingResult
from veritas.services.ledger import HederaLedgerClient


def test_health():
    client = TestClient(app)
    r = client.get("/health")
    assert r.status_code == 200

    payload = r.json()
    assert payload["status"] == "healthy"
    assert payload["ledger"] == "stub"
    assert client.get("/api/health").status_code == 200


def test_health_reports_db_failure(monkeypatch):
    monkeypatch.setattr(main_mod, "ping_db", lambda engine: DBPingResult(ok=False, detail="down"))
    client = TestClient(app)
    r = client.get("/api/health")
    assert r.status_code == 503
    assert r.json()["status"] == "unhealthy"


def test_cors_allows_default_dev_origin():
    client = TestClient(app)
    res = client.options(
        "/api/health",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert res.headers.get("access-control-allow-origin") == "http://localhost:5173"


def test_health_reports_confirm_only_hedera_ledger(monkeypatch):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    monkeypatch.setattr(app.state, "ledger", HederaLedgerClient(httpx.AsyncClient(transport=transport)))
    client = TestClient(app)
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ledger"] == "confirm-only"
