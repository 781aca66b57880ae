"""Fixtures for API tests: temp DuckDB file and a deterministic ledger."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from veritas.api.deps import get_db, get_ledger
from veritas.api.main import app
from veritas.db.schema import Base
from veritas.services.ledger import StubLedgerClient


@pytest.fixture
def ledger():
    return StubLedgerClient(time_fn=lambda: 1_700_000_000.0)


@pytest.fixture
def client(tmp_path, ledger):
    engine = create_engine(f"duckdb:///{tmp_path / 'api.duckdb'}")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    def _db_override():
        s = Session()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _db_override
    app.dependency_overrides[get_ledger] = lambda: ledger
    yield TestClient(app)
    app.dependency_overrides.clear()
    engine.dispose()
