"""Claim repository."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from veritas.db.schema import Claim as ClaimRow
from veritas.models.domain import Claim


def to_claim(row: ClaimRow) -> Claim:
    return Claim(
        id=row.id,
        product_id=row.product_id,
        claim_type=row.claim_type,
        description=row.claim_description,
        ledger_transaction_id=row.hcs_transaction_id,
        ledger_timestamp=row.hcs_timestamp,
        created_at=row.created_at,
    )


class ClaimRepository:
    """Repository for the `claims` table."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        product_id: str,
        claim_type: str,
        description: str,
        claim_id: Optional[str] = None,
        ledger_transaction_id: Optional[str] = None,
        ledger_timestamp: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
    ) -> Claim:
        """
        Insert a claim with whatever ledger proof it already has.

        Notarization runs before the insert, so claim rows are never updated.
        """
        if ledger_timestamp is not None and not ledger_transaction_id:
            raise ValueError("ledger_timestamp requires ledger_transaction_id")
        row = ClaimRow(
            product_id=product_id,
            claim_type=claim_type,
            claim_description=description,
            hcs_transaction_id=ledger_transaction_id,
            hcs_timestamp=ledger_timestamp,
            created_at=created_at or datetime.utcnow(),
        )
        if claim_id:
            row.id = claim_id
        self.session.add(row)
        self.session.flush()
        return to_claim(row)

    def list_by_product(self, product_id: str) -> List[Claim]:
        rows = self.session.execute(
            select(ClaimRow)
            .where(ClaimRow.product_id == product_id)
            .order_by(ClaimRow.created_at, ClaimRow.id)
        ).scalars()
        return [to_claim(r) for r in rows]

    def get_for_product(self, product_id: str, claim_id: str) -> Optional[Claim]:
        row = self.session.execute(
            select(ClaimRow).where(ClaimRow.id == claim_id, ClaimRow.product_id == product_id)
        ).scalar_one_or_none()
        return to_claim(row) if row is not None else None

    def get(self, claim_id: str) -> Optional[Claim]:
        row = self.session.get(ClaimRow, claim_id)
        return to_claim(row) if row is not None else None

    def _filtered(self, stmt, product_id: Optional[str]):
        if product_id:
            stmt = stmt.where(ClaimRow.product_id == product_id)
        return stmt

    def list_recent(self, product_id: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[Claim]:
        """Newest first, optionally for one product."""
        stmt = self._filtered(select(ClaimRow), product_id)
        rows = self.session.execute(
            stmt.order_by(ClaimRow.created_at.desc(), ClaimRow.id).limit(limit).offset(offset)
        ).scalars()
        return [to_claim(r) for r in rows]

    def count(self, product_id: Optional[str] = None) -> int:
        stmt = self._filtered(select(func.count()).select_from(ClaimRow), product_id)
        return self.session.execute(stmt).scalar_one()
