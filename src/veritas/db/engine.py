from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from veritas.config.settings import settings

DUCKDB_PREFIX = "duckdb:///"


@dataclass(frozen=True)
class DBPingResult:
    ok: bool
    detail: str


def resolve_db_url(db_url: Optional[str] = None) -> str:
    """Explicit argument, then DATABASE_URL, then VERITAS_DB_URL / the default file."""
    return db_url or os.getenv("DATABASE_URL") or settings.db_url


def _ensure_duckdb_dir(url: str) -> None:
    path = url[len(DUCKDB_PREFIX):]
    if path == ":memory:":
        return
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def build_engine(db_url: Optional[str] = None) -> Engine:
    url = resolve_db_url(db_url)
    if url.startswith("postgresql"):
        return create_engine(url, future=True, pool_pre_ping=True)
    if url.startswith(DUCKDB_PREFIX):
        # DuckDB won't create missing directories for a file database
        _ensure_duckdb_dir(url)
    return create_engine(url, future=True)


def ping_db(engine: Engine) -> DBPingResult:
    """Health check for the database. Always returns a result, never raises."""
    try:
        with engine.connect() as conn:
            conn.execute(text("select 1")).scalar_one()
    except Exception as e:
        return DBPingResult(ok=False, detail=f"{type(e).__name__}: {e}")
    return DBPingResult(ok=True, detail="ok")
