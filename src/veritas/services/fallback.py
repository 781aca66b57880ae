"""Structurally complete substitute payloads for degraded mode.

Everything produced here is synthetic and must never be persisted. The
DemoResult wrapper added by the executor is what tells callers so.
"""

from __future__ import annotations

import random
import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from veritas.data.demo_data import DEMO_ACCOUNT_ID, DEMO_TOPIC_ID, DEMO_VERIFICATIONS
from veritas.models.domain import (
    Claim,
    LedgerResult,
    Product,
    ProductInput,
    QRCodeData,
    SubmissionReport,
    VerificationOutcome,
    VerificationReport,
)
from veritas.services.aggregation import build_report, verification_url
from veritas.services.batch_id import extract_prefix, generate_batch_id


class FallbackSynthesizer:
    def __init__(
        self,
        network: str = "testnet",
        topic_id: str = DEMO_TOPIC_ID,
        account_id: str = DEMO_ACCOUNT_ID,
        time_fn: Callable[[], float] = time.time,
        rand: random.Random | None = None,
    ) -> None:
        self.network = network
        self.topic_id = topic_id
        self.account_id = account_id
        self.time_fn = time_fn
        self.rand = rand or random.Random()

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.time_fn(), tz=timezone.utc)

    def _fake_transaction_id(self) -> str:
        # Looks like a Hedera transaction id; never submitted anywhere.
        seconds = int(self.time_fn())
        nanos = self.rand.randrange(1_000_000_000)
        return f"{self.account_id}@{seconds}.{nanos:09d}"

    def submission_fallback(self, product_input: ProductInput) -> SubmissionReport:
        now = self._now()
        batch_id = generate_batch_id(
            extract_prefix(product_input.product_name),
            now_ms=lambda: int(self.time_fn() * 1000),
            rand=self.rand,
        )
        product = Product(
            id=str(uuid.uuid4()),
            batch_id=batch_id,
            product_name=product_input.product_name,
            supplier_name=product_input.supplier_name,
            description=product_input.description or "",
            created_at=now,
        )

        claims: list[Claim] = []
        results = [
            LedgerResult(
                type="PRODUCT",
                success=True,
                transaction_id=self._fake_transaction_id(),
                topic_id=self.topic_id,
                consensus_timestamp=now.isoformat(),
            )
        ]
        for c in product_input.claims:
            tx = self._fake_transaction_id()
            claim = Claim(
                id=str(uuid.uuid4()),
                product_id=product.id,
                claim_type=c.claim_type,
                description=c.description,
                ledger_transaction_id=tx,
                ledger_timestamp=now,
                created_at=now,
            )
            claims.append(claim)
            results.append(
                LedgerResult(
                    type="CLAIM",
                    success=True,
                    claim_id=claim.id,
                    transaction_id=tx,
                    topic_id=self.topic_id,
                    consensus_timestamp=now.isoformat(),
                )
            )

        return SubmissionReport(
            product=product,
            claims=claims,
            qr_code=QRCodeData(batch_id=batch_id, verification_url=verification_url(batch_id)),
            ledger_results=results,
        )

    def verification_fallback(self, batch_id: str) -> VerificationReport:
        curated = DEMO_VERIFICATIONS.get(batch_id)
        if curated is not None:
            product = Product.model_validate(curated["product"])
            claims = [Claim.model_validate(c) for c in curated["claims"]]
            verified = set(curated["verified"])
        else:
            product, claims = self._generic_demo(batch_id)
            verified = {c.id for c in claims}

        outcomes = [
            VerificationOutcome(
                claim_id=c.id,
                transaction_id=c.ledger_transaction_id,
                verified=c.id in verified,
            )
            for c in claims
            if c.ledger_transaction_id
        ]
        return build_report(product, claims, outcomes, self.topic_id, self.network)

    def _generic_demo(self, batch_id: str) -> tuple[Product, list[Claim]]:
        now = self._now()
        product = Product(
            id="demo-product",
            batch_id=batch_id,
            product_name="Demo Product",
            supplier_name="Demo Supplier",
            description="This is a demo product for testing purposes.",
            created_at=now,
        )
        claim = Claim(
            id="demo-claim",
            product_id=product.id,
            claim_type="demo",
            description="This is a demo claim showing fallback functionality.",
            ledger_transaction_id=self._fake_transaction_id(),
            created_at=now,
        )
        return product, [claim]
