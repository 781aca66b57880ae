"""API schemas."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from veritas.models.domain import Claim, ClaimProofLinks, Product, ProofLinks, VerificationOutcome

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T
    timestamp: datetime = Field(default_factory=_now)


class ErrorBody(BaseModel):
    message: str
    status: int
    details: Optional[Any] = None
    timestamp: datetime = Field(default_factory=_now)


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorBody


class ClaimVerificationOut(BaseModel):
    product: Product
    claim: Claim
    verification: Optional[VerificationOutcome]
    message: Optional[str] = None
    proof_links: Optional[ClaimProofLinks]


class TransactionConfirmationOut(BaseModel):
    verified: bool
    consensus_timestamp: Optional[str] = None
    result: Optional[str] = None
    error: Optional[str] = None


class TransactionVerificationOut(BaseModel):
    transaction_id: str
    verification: TransactionConfirmationOut
    proof_links: ProofLinks
