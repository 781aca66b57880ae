"""API dependencies."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session, sessionmaker

from veritas.db.engine import build_engine
from veritas.db.init_db import ensure_db
from veritas.services.ledger import LedgerClient


def get_db() -> Generator[Session, None, None]:
    engine = build_engine()
    ensure_db(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_ledger(request: Request) -> LedgerClient:
    # One ledger client per app, built at startup.
    return request.app.state.ledger
