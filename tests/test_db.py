from __future__ import annotations

from sqlalchemy import text

from veritas.db.engine import build_engine, ping_db
from veritas.db.init_db import ensure_db, init_db


def test_ping_db_inmemory_duckdb() -> None:
    engine = build_engine("duckdb:///:memory:")
    result = ping_db(engine)
    assert result.ok is True
    assert result.detail == "ok"


def _tables(engine) -> set[str]:
    with engine.connect() as conn:
        rows = conn.execute(
            text(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = 'main'
                """
            )
        ).fetchall()
    return {r[0] for r in rows}


def test_init_db_creates_tables(tmp_path) -> None:
    engine = build_engine(f"duckdb:///{tmp_path / 'nested' / 'veritas.duckdb'}")
    init_db(engine)
    assert {"products", "claims"} <= _tables(engine)


def test_ensure_db_keeps_rows(tmp_path) -> None:
    engine = build_engine(f"duckdb:///{tmp_path / 'veritas.duckdb'}")
    init_db(engine)
    with engine.connect() as conn:
        conn.execute(
            text(
                "INSERT INTO products (id, batch_id, product_name, supplier_name, created_at) "
                "VALUES ('p1', 'TEA-1-AAAAAA', 'Tea', 'Leafy', TIMESTAMP '2024-01-01 00:00:00')"
            )
        )
        conn.commit()

    ensure_db(engine)
    with engine.connect() as conn:
        assert conn.execute(text("SELECT count(*) FROM products")).scalar_one() == 1
