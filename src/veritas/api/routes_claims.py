"""Claim routes: add a claim to an existing product, list and look up claims."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from veritas.api.deps import get_db, get_ledger
from veritas.api.rate_limit import enforce_submission_limit
from veritas.api.schemas import Envelope
from veritas.config.settings import settings
from veritas.errors import NotFoundError
from veritas.models.domain import (
    Claim,
    ClaimPage,
    ClaimSubmissionReport,
    ClaimWithProduct,
    NewClaimInput,
    Pagination,
    Product,
)
from veritas.repos.claims_repo import ClaimRepository
from veritas.repos.products_repo import ProductRepository
from veritas.services.ledger import LedgerClient
from veritas.services.proof_links import build_proof_links
from veritas.services.submission import SubmissionService

router = APIRouter(prefix="/claims", tags=["claims"])


def _with_product(claim: Claim, product: Product) -> ClaimWithProduct:
    links = None
    if claim.ledger_transaction_id:
        links = build_proof_links(claim.ledger_transaction_id, settings.hedera_topic_id, settings.hedera_network)
    return ClaimWithProduct(claim=claim, product=product, proof_links=links)


@router.post("", response_model=Envelope[ClaimSubmissionReport], status_code=201)
async def create_claim(
    payload: NewClaimInput,
    request: Request,
    session: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger),
):
    enforce_submission_limit(request)

    try:
        report = await SubmissionService(session, ledger).add_claim(payload)
    except Exception:
        session.rollback()
        raise
    return Envelope(data=report)


@router.get("", response_model=Envelope[ClaimPage])
def list_claims(
    product_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_db),
):
    claims_repo = ClaimRepository(session)
    products_repo = ProductRepository(session)

    claims = claims_repo.list_recent(product_id=product_id, limit=limit, offset=offset)
    products: dict[str, Product] = {}
    for c in claims:
        if c.product_id not in products:
            products[c.product_id] = products_repo.get(c.product_id)

    return Envelope(
        data=ClaimPage(
            claims=[_with_product(c, products[c.product_id]) for c in claims],
            pagination=Pagination(limit=limit, offset=offset, total=claims_repo.count(product_id)),
        )
    )


@router.get("/{claim_id}", response_model=Envelope[ClaimWithProduct])
def get_claim(claim_id: str, session: Session = Depends(get_db)):
    claim = ClaimRepository(session).get(claim_id)
    if claim is None:
        raise NotFoundError("Claim not found", details={"claim_id": claim_id})
    return Envelope(data=_with_product(claim, ProductRepository(session).get(claim.product_id)))
