"""Product and claim submission: notarize, then persist each record best-effort."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from veritas.config.settings import settings
from veritas.errors import NotFoundError, ServiceError
from veritas.models.domain import (
    Claim,
    ClaimInput,
    ClaimSubmissionReport,
    LedgerResult,
    NewClaimInput,
    NotarizationRecord,
    Product,
    ProductInput,
    QRCodeData,
    SubmissionReport,
)
from veritas.repos.claims_repo import ClaimRepository
from veritas.repos.products_repo import ProductRepository
from veritas.services.aggregation import verification_url
from veritas.services.batch_id import extract_prefix, generate_batch_id
from veritas.services.ledger import LedgerClient
from veritas.services.proof_links import build_proof_links

logger = logging.getLogger(__name__)

MAX_BATCH_ID_ATTEMPTS = 5


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class _Notarized:
    record: Optional[NotarizationRecord]
    error: Optional[str]


class SubmissionService:
    """Creates a product and its claims and anchors each on the ledger."""

    def __init__(
        self,
        session: Session,
        ledger: LedgerClient,
        topic_id: str | None = None,
        timeout_s: float | None = None,
        now_fn: Callable[[], datetime] = datetime.utcnow,
    ):
        self.session = session
        self.ledger = ledger
        self.topic_id = topic_id or settings.hedera_topic_id
        self.timeout_s = settings.ledger_timeout_s if timeout_s is None else timeout_s
        self.now_fn = now_fn
        self.products = ProductRepository(session)
        self.claims = ClaimRepository(session)

    def _new_batch_id(self, product_name: str) -> str:
        prefix = extract_prefix(product_name)
        for _ in range(MAX_BATCH_ID_ATTEMPTS):
            batch_id = generate_batch_id(prefix)
            if not self.products.batch_id_exists(batch_id):
                return batch_id
        raise ServiceError(f"Failed to generate unique batch ID for prefix {prefix}")

    async def _notarize(self, message: dict) -> _Notarized:
        try:
            record = await asyncio.wait_for(
                self.ledger.notarize(json.dumps(message, default=str)),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            return _Notarized(record=None, error="Ledger submission timed out")
        except Exception as e:
            return _Notarized(record=None, error=str(e))
        return _Notarized(record=record, error=None)

    def _ledger_result(self, kind: str, outcome: _Notarized, claim_id: str | None = None) -> LedgerResult:
        if outcome.record is None:
            return LedgerResult(type=kind, success=False, claim_id=claim_id, error=outcome.error)
        return LedgerResult(
            type=kind,
            success=True,
            claim_id=claim_id,
            transaction_id=outcome.record.transaction_id,
            topic_id=outcome.record.topic_id or self.topic_id,
            consensus_timestamp=outcome.record.consensus_timestamp.isoformat(),
        )

    async def _create_claim(self, product: Product, item: ClaimInput) -> tuple[Claim, LedgerResult]:
        """Notarize first, then insert the claim with whatever proof came back."""
        claim_id = str(uuid4())
        created_at = self.now_fn()
        notarized = await self._notarize(
            {
                "type": "CLAIM_SUBMISSION",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": {
                    "claim_id": claim_id,
                    "product_batch_id": product.batch_id,
                    "claim_type": item.claim_type,
                    "claim_description": item.description,
                    "created_at": created_at.isoformat(),
                },
            }
        )
        if notarized.error:
            logger.warning("Failed to submit claim %s to ledger: %s", claim_id, notarized.error)

        record = notarized.record
        claim = self.claims.create(
            product_id=product.id,
            claim_type=item.claim_type,
            description=item.description,
            claim_id=claim_id,
            ledger_transaction_id=record.transaction_id if record else None,
            ledger_timestamp=_naive_utc(record.consensus_timestamp) if record else None,
            created_at=created_at,
        )
        return claim, self._ledger_result("CLAIM", notarized, claim_id=claim_id)

    async def submit(self, product_input: ProductInput) -> SubmissionReport:
        batch_id = self._new_batch_id(product_input.product_name)
        product: Product = self.products.create(
            batch_id=batch_id,
            product_name=product_input.product_name,
            supplier_name=product_input.supplier_name,
            description=product_input.description,
            created_at=self.now_fn(),
        )

        results: list[LedgerResult] = []
        notarized = await self._notarize(
            {
                "type": "PRODUCT_REGISTRATION",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "data": {
                    "batch_id": product.batch_id,
                    "product_name": product.product_name,
                    "supplier_name": product.supplier_name,
                    "description": product.description,
                    "created_at": product.created_at.isoformat(),
                },
            }
        )
        if notarized.error:
            logger.warning("Failed to submit product %s to ledger: %s", batch_id, notarized.error)
        results.append(self._ledger_result("PRODUCT", notarized))

        claims: list[Claim] = []
        for item in product_input.claims:
            claim, result = await self._create_claim(product, item)
            claims.append(claim)
            results.append(result)

        self.session.commit()
        logger.info(
            "Submitted %s with %d claims (%d notarized)",
            batch_id,
            len(claims),
            sum(1 for r in results if r.type == "CLAIM" and r.success),
        )
        return SubmissionReport(
            product=product,
            claims=claims,
            qr_code=QRCodeData(batch_id=batch_id, verification_url=verification_url(batch_id)),
            ledger_results=results,
        )

    async def add_claim(self, claim_input: NewClaimInput, network: str | None = None) -> ClaimSubmissionReport:
        """Attach one more claim to an existing product and notarize it."""
        product = self.products.get(claim_input.product_id)
        if product is None:
            raise NotFoundError("Product not found", details={"product_id": claim_input.product_id})

        claim, result = await self._create_claim(product, claim_input)
        self.session.commit()
        logger.info("Added claim %s to %s (notarized=%s)", claim.id, product.batch_id, result.success)

        links = None
        if claim.ledger_transaction_id:
            links = build_proof_links(claim.ledger_transaction_id, self.topic_id, network or settings.hedera_network)
        return ClaimSubmissionReport(
            claim=claim,
            product=product,
            qr_code=QRCodeData(
                batch_id=product.batch_id,
                verification_url=f"{verification_url(product.batch_id)}?claim={claim.id}",
            ),
            ledger_result=result,
            proof_links=links,
        )
