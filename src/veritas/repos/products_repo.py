"""Product repository."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, literal_column, select
from sqlalchemy.orm import Session

from veritas.db.schema import Product as ProductRow
from veritas.models.domain import PrefixStatistics, Product


def to_product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        batch_id=row.batch_id,
        product_name=row.product_name,
        supplier_name=row.supplier_name,
        description=row.description,
        created_at=row.created_at,
    )


class ProductRepository:
    """Repository for the `products` table. Rows are insert-only."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        batch_id: str,
        product_name: str,
        supplier_name: str,
        description: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Product:
        row = ProductRow(
            batch_id=batch_id,
            product_name=product_name,
            supplier_name=supplier_name,
            description=description,
            created_at=created_at or datetime.utcnow(),
        )
        self.session.add(row)
        self.session.flush()  # ensure product exists before claim inserts
        return to_product(row)

    def get_by_batch_id(self, batch_id: str) -> Optional[Product]:
        row = self.session.execute(
            select(ProductRow).where(ProductRow.batch_id == batch_id)
        ).scalar_one_or_none()
        return to_product(row) if row is not None else None

    def batch_id_exists(self, batch_id: str) -> bool:
        return (
            self.session.execute(
                select(ProductRow.id).where(ProductRow.batch_id == batch_id)
            ).first()
            is not None
        )

    def get(self, product_id: str) -> Optional[Product]:
        row = self.session.get(ProductRow, product_id)
        return to_product(row) if row is not None else None

    def prefix_statistics(self) -> List[PrefixStatistics]:
        """Usage per batch-ID prefix, most used first."""
        # inline constants so the grouped expression matches the selected one
        prefix = func.split_part(ProductRow.batch_id, literal_column("'-'"), literal_column("1")).label("prefix")
        uses = func.count(ProductRow.id).label("uses")
        first_used = func.min(ProductRow.created_at).label("first_used")
        stmt = (
            select(prefix, uses, first_used, func.max(ProductRow.created_at).label("last_used"))
            .group_by(prefix)
            .order_by(uses.desc(), first_used)
        )
        return [
            PrefixStatistics(prefix=r.prefix, count=r.uses, first_used=r.first_used, last_used=r.last_used)
            for r in self.session.execute(stmt)
        ]
