"""Global test fixtures."""

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from veritas.api.main import app  # noqa: E402
from veritas.api.rate_limit import SubmissionRateLimiter  # noqa: E402


@pytest.fixture(autouse=True)
def _memory_db(monkeypatch):
    # Never touch the developer's data/veritas.duckdb from tests.
    monkeypatch.setenv("DATABASE_URL", "duckdb:///:memory:")
    yield


@pytest.fixture(autouse=True)
def _relax_rate_limit():
    app.state.submission_limiter = SubmissionRateLimiter(limit_per_min=10_000, time_fn=lambda: 0)
    yield
