"""Backend-side verification by batch ID."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from veritas.errors import NotFoundError, ValidationError
from veritas.models.domain import (
    Claim,
    ClaimProofLinks,
    LedgerConfirmation,
    Product,
    ProofLinks,
    VerificationOutcome,
    VerificationReport,
)
from veritas.repos.claims_repo import ClaimRepository
from veritas.repos.products_repo import ProductRepository
from veritas.services.aggregation import VerificationAggregator
from veritas.services.ledger import LedgerClient, is_transaction_id
from veritas.services.proof_links import build_proof_links


@dataclass(frozen=True)
class ClaimCheck:
    product: Product
    claim: Claim
    outcome: Optional[VerificationOutcome]
    proof_links: Optional[ClaimProofLinks]


@dataclass(frozen=True)
class TransactionCheck:
    transaction_id: str
    confirmation: LedgerConfirmation
    proof_links: ProofLinks
    error: Optional[str] = None


class VerificationService:
    """Reads a product and its claims, confirms them, aggregates the verdict."""

    def __init__(
        self,
        session: Session,
        ledger: LedgerClient,
        network: str | None = None,
        topic_id: str | None = None,
    ):
        self.products = ProductRepository(session)
        self.claims = ClaimRepository(session)
        self.aggregator = VerificationAggregator(ledger, network=network, topic_id=topic_id)

    def _product(self, batch_id: str) -> Product:
        product = self.products.get_by_batch_id(batch_id)
        if product is None:
            raise NotFoundError("Product not found", details={"batch_id": batch_id})
        return product

    def product_detail(self, batch_id: str) -> tuple[Product, list[Claim]]:
        product = self._product(batch_id)
        return product, self.claims.list_by_product(product.id)

    async def verify(self, batch_id: str) -> VerificationReport:
        product, claims = self.product_detail(batch_id)
        return await self.aggregator.verify(product, claims)

    async def verify_claim(self, batch_id: str, claim_id: str) -> ClaimCheck:
        product = self._product(batch_id)
        claim = self.claims.get_for_product(product.id, claim_id)
        if claim is None:
            raise NotFoundError(
                "Claim not found for this product",
                details={"batch_id": batch_id, "claim_id": claim_id},
            )
        outcome, links = await self.aggregator.verify_claim(claim)
        return ClaimCheck(product=product, claim=claim, outcome=outcome, proof_links=links)

    async def verify_transaction(self, transaction_id: str) -> TransactionCheck:
        if not is_transaction_id(transaction_id):
            raise ValidationError(
                "Invalid transaction ID format",
                details={
                    "transaction_id": transaction_id,
                    "expected_format": "0.0.12345@1640995200.123456789",
                },
            )
        agg = self.aggregator
        links = build_proof_links(transaction_id, agg.topic_id, agg.network)
        try:
            confirmation = await agg.ledger.confirm(transaction_id)
        except Exception as e:
            return TransactionCheck(
                transaction_id=transaction_id,
                confirmation=LedgerConfirmation(verified=False),
                proof_links=links,
                error=str(e),
            )
        return TransactionCheck(transaction_id=transaction_id, confirmation=confirmation, proof_links=links)
