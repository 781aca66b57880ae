# src/veritas/db/schema.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _uuid() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.utcnow()


class Base(DeclarativeBase):
    pass


class Product(Base):
    """
    One row per submitted product. Immutable once written.
    """
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    batch_id: Mapped[str] = mapped_column(String, nullable=False)

    product_name: Mapped[str] = mapped_column(String, nullable=False)
    supplier_name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (UniqueConstraint("batch_id", name="uq_products_batch_id"),)


class Claim(Base):
    """
    Claims attached to a product. Ledger columns are filled at insert time
    when notarization succeeded and stay NULL otherwise.
    """
    __tablename__ = "claims"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_uuid)
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)

    claim_type: Mapped[str] = mapped_column(String, nullable=False)
    claim_description: Mapped[str] = mapped_column(Text, nullable=False)

    hcs_transaction_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    hcs_timestamp: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=_utcnow,
    )
