"""Product submission and lookup routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from veritas.api.deps import get_db, get_ledger
from veritas.api.rate_limit import enforce_submission_limit
from veritas.api.schemas import Envelope
from veritas.errors import NotFoundError
from veritas.models.domain import PrefixStatistics, ProductDetail, ProductInput, SubmissionReport
from veritas.repos.claims_repo import ClaimRepository
from veritas.repos.products_repo import ProductRepository
from veritas.services.ledger import LedgerClient
from veritas.services.submission import SubmissionService

router = APIRouter(prefix="/products", tags=["products"])
stats_router = APIRouter(tags=["stats"])


@router.post("", response_model=Envelope[SubmissionReport], status_code=201)
async def create_product(
    payload: ProductInput,
    request: Request,
    session: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger),
):
    enforce_submission_limit(request)

    try:
        report = await SubmissionService(session, ledger).submit(payload)
    except Exception:
        session.rollback()
        raise
    return Envelope(data=report)


@router.get("/{batch_id}", response_model=Envelope[ProductDetail])
def get_product(batch_id: str, session: Session = Depends(get_db)):
    product = ProductRepository(session).get_by_batch_id(batch_id)
    if product is None:
        raise NotFoundError("Product not found", details={"batch_id": batch_id})
    claims = ClaimRepository(session).list_by_product(product.id)
    return Envelope(data=ProductDetail(product=product, claims=claims))


@stats_router.get("/batch-stats", response_model=Envelope[list[PrefixStatistics]])
def batch_stats(session: Session = Depends(get_db)):
    return Envelope(data=ProductRepository(session).prefix_statistics())
