"""Domain models.

Pydantic models are the wire format on both sides of the HTTP API; frozen
dataclasses are internal records that never leave the process.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class OverallStatus(str, Enum):
    NO_CLAIMS = "no_claims"
    NO_BLOCKCHAIN_DATA = "no_blockchain_data"
    VERIFIED = "verified"
    PARTIALLY_VERIFIED = "partially_verified"
    UNVERIFIED = "unverified"


class Product(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    batch_id: str
    product_name: str
    supplier_name: str
    description: Optional[str] = None
    created_at: datetime


class Claim(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    product_id: str
    claim_type: str
    description: str
    ledger_transaction_id: Optional[str] = None
    ledger_timestamp: Optional[datetime] = None
    created_at: datetime

    @model_validator(mode="after")
    def _timestamp_requires_transaction(self) -> "Claim":
        if self.ledger_timestamp is not None and not self.ledger_transaction_id:
            raise ValueError("ledger_timestamp set without ledger_transaction_id")
        return self


class VerificationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    claim_id: str
    transaction_id: str
    verified: bool
    consensus_timestamp: Optional[str] = None
    error: Optional[str] = None


class AggregatedVerification(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_status: OverallStatus
    total_claims: int
    claims_with_ledger_data: int
    verified_claims: int
    verification_percentage: int


class ProofLinks(BaseModel):
    model_config = ConfigDict(frozen=True)

    transaction: str
    topic: str
    explorer: str
    explorer_topic: str


class ClaimProofLinks(BaseModel):
    claim_id: str
    transaction_id: str
    links: ProofLinks


class QRCodeData(BaseModel):
    """What a QR code encodes; rendering the image is a frontend concern."""

    batch_id: str
    verification_url: str


class VerificationReport(BaseModel):
    product: Product
    claims: list[Claim]
    verification: AggregatedVerification
    ledger_verifications: list[VerificationOutcome]
    proof_links: list[ClaimProofLinks]
    qr_code: QRCodeData


class LedgerResult(BaseModel):
    type: Literal["PRODUCT", "CLAIM"]
    success: bool
    claim_id: Optional[str] = None
    transaction_id: Optional[str] = None
    topic_id: Optional[str] = None
    consensus_timestamp: Optional[str] = None
    error: Optional[str] = None


class SubmissionReport(BaseModel):
    product: Product
    claims: list[Claim]
    qr_code: QRCodeData
    ledger_results: list[LedgerResult]


class ClaimInput(BaseModel):
    claim_type: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=5, max_length=2000)


class ProductInput(BaseModel):
    product_name: str = Field(..., min_length=2, max_length=255)
    supplier_name: str = Field(..., min_length=2, max_length=255)
    description: str = Field("", max_length=2000)
    claims: list[ClaimInput] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _strip_strings(cls, data):
        # Length limits apply to trimmed values
        if isinstance(data, dict):
            data = {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
            claims = data.get("claims")
            if isinstance(claims, list):
                data["claims"] = [
                    {k: v.strip() if isinstance(v, str) else v for k, v in c.items()}
                    if isinstance(c, dict)
                    else c
                    for c in claims
                ]
        return data


class PrefixStatistics(BaseModel):
    prefix: str
    count: int
    first_used: Optional[datetime] = None
    last_used: Optional[datetime] = None


@dataclass(frozen=True)
class NotarizationRecord:
    transaction_id: str
    consensus_timestamp: datetime
    topic_id: str | None = None
    sequence_number: int | None = None


@dataclass(frozen=True)
class LedgerConfirmation:
    verified: bool
    consensus_timestamp: str | None = None
    result: str | None = None


class ProductDetail(BaseModel):
    product: Product
    claims: list[Claim]


class NewClaimInput(ClaimInput):
    """A claim added to an already registered product."""

    product_id: str = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _strip_strings(cls, data):
        if isinstance(data, dict):
            data = {k: v.strip() if isinstance(v, str) else v for k, v in data.items()}
        return data


class ClaimSubmissionReport(BaseModel):
    claim: Claim
    product: Product
    qr_code: QRCodeData
    ledger_result: LedgerResult
    proof_links: Optional[ProofLinks] = None


class ClaimWithProduct(BaseModel):
    claim: Claim
    product: Product
    proof_links: Optional[ProofLinks] = None


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class ClaimPage(BaseModel):
    claims: list[ClaimWithProduct]
    pagination: Pagination
