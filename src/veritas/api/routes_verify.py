"""Verification API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from veritas.api.deps import get_db, get_ledger
from veritas.api.schemas import (
    ClaimVerificationOut,
    Envelope,
    TransactionConfirmationOut,
    TransactionVerificationOut,
)
from veritas.models.domain import VerificationReport
from veritas.services.ledger import LedgerClient
from veritas.services.verification import VerificationService

router = APIRouter(prefix="/verify", tags=["verify"])


@router.get("/transaction/{transaction_id}", response_model=Envelope[TransactionVerificationOut])
async def verify_transaction(
    transaction_id: str,
    session: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger),
):
    check = await VerificationService(session, ledger).verify_transaction(transaction_id)
    return Envelope(
        data=TransactionVerificationOut(
            transaction_id=check.transaction_id,
            verification=TransactionConfirmationOut(
                verified=check.confirmation.verified,
                consensus_timestamp=check.confirmation.consensus_timestamp,
                result=check.confirmation.result,
                error=check.error,
            ),
            proof_links=check.proof_links,
        )
    )


@router.get("/{batch_id}", response_model=Envelope[VerificationReport])
async def verify_product(
    batch_id: str,
    session: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger),
):
    report = await VerificationService(session, ledger).verify(batch_id)
    return Envelope(data=report)


@router.get("/{batch_id}/claims/{claim_id}", response_model=Envelope[ClaimVerificationOut])
async def verify_claim(
    batch_id: str,
    claim_id: str,
    session: Session = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger),
):
    check = await VerificationService(session, ledger).verify_claim(batch_id, claim_id)
    return Envelope(
        data=ClaimVerificationOut(
            product=check.product,
            claim=check.claim,
            verification=check.outcome,
            message=None if check.outcome else "No blockchain transaction found for this claim",
            proof_links=check.proof_links,
        )
    )
