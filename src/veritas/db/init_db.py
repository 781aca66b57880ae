from __future__ import annotations

from sqlalchemy.engine import Engine

from veritas.db.schema import Base


def init_db(engine: Engine) -> None:
    """
    Recreate the schema from scratch.

    DuckDB is happier with DDL on a plain connection and an explicit commit
    than inside engine.begin().
    """
    conn = engine.connect()
    try:
        Base.metadata.drop_all(bind=conn)
        Base.metadata.create_all(bind=conn)
        conn.commit()
    finally:
        conn.close()


def ensure_db(engine: Engine) -> None:
    """Create missing tables, keep existing data."""
    conn = engine.connect()
    try:
        Base.metadata.create_all(bind=conn)
        conn.commit()
    finally:
        conn.close()
