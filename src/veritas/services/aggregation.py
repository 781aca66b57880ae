"""Per-claim ledger confirmation and the overall trust verdict."""

from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from veritas.config.settings import settings
from veritas.models.domain import (
    AggregatedVerification,
    Claim,
    ClaimProofLinks,
    OverallStatus,
    Product,
    QRCodeData,
    VerificationOutcome,
    VerificationReport,
)
from veritas.services.ledger import LedgerClient
from veritas.services.proof_links import build_proof_links

logger = logging.getLogger(__name__)


def _percentage(verified: int, total: int) -> int:
    if total <= 0:
        return 0
    # half-up, not Python's banker's rounding
    value = Decimal(100 * verified) / Decimal(total)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def aggregate(
    claims: Sequence[Claim],
    outcomes: Iterable[VerificationOutcome],
) -> AggregatedVerification:
    """
    Combine claims and their ledger outcomes into one verdict.

    Precedence: no_claims > no_blockchain_data > verified >
    partially_verified > unverified. "verified" means every claim that was
    sent to the ledger confirmed; claims never notarized are reported through
    claims_with_ledger_data < total_claims instead of lowering the status.

    Outcomes only count for claims that carry a transaction ID, once per claim.
    """
    total_claims = len(claims)
    ledger_claim_ids = {c.id for c in claims if c.ledger_transaction_id}
    claims_with_ledger_data = sum(1 for c in claims if c.ledger_transaction_id)
    verified_claims = len({o.claim_id for o in outcomes if o.verified and o.claim_id in ledger_claim_ids})

    if total_claims == 0:
        status = OverallStatus.NO_CLAIMS
    elif claims_with_ledger_data == 0:
        status = OverallStatus.NO_BLOCKCHAIN_DATA
    elif verified_claims == claims_with_ledger_data:
        status = OverallStatus.VERIFIED
    elif verified_claims > 0:
        status = OverallStatus.PARTIALLY_VERIFIED
    else:
        status = OverallStatus.UNVERIFIED

    return AggregatedVerification(
        overall_status=status,
        total_claims=total_claims,
        claims_with_ledger_data=claims_with_ledger_data,
        verified_claims=verified_claims,
        verification_percentage=_percentage(verified_claims, total_claims),
    )


async def confirm_claim(
    claim: Claim,
    ledger: LedgerClient,
    timeout_s: float | None = None,
) -> VerificationOutcome:
    """Confirm one claim; failures are recorded on the outcome, never raised."""
    tx = claim.ledger_transaction_id or ""
    timeout_s = settings.ledger_timeout_s if timeout_s is None else timeout_s
    try:
        confirmation = await asyncio.wait_for(ledger.confirm(tx), timeout=timeout_s)
    except asyncio.TimeoutError:
        logger.warning("Timed out verifying transaction %s for claim %s", tx, claim.id)
        return VerificationOutcome(
            claim_id=claim.id, transaction_id=tx, verified=False, error="Ledger confirmation timed out"
        )
    except Exception as e:
        logger.warning("Failed to verify transaction %s for claim %s: %s", tx, claim.id, e)
        return VerificationOutcome(claim_id=claim.id, transaction_id=tx, verified=False, error=str(e))
    return VerificationOutcome(
        claim_id=claim.id,
        transaction_id=tx,
        verified=confirmation.verified,
        consensus_timestamp=confirmation.consensus_timestamp,
    )


async def confirm_claims(claims: Sequence[Claim], ledger: LedgerClient) -> list[VerificationOutcome]:
    """Confirm every claim that has a transaction ID, concurrently, in claim order."""
    pending = [c for c in claims if c.ledger_transaction_id]
    if not pending:
        return []
    return list(await asyncio.gather(*(confirm_claim(c, ledger) for c in pending)))


def proof_links_for(claims: Sequence[Claim], topic_id: str | None, network: str | None) -> list[ClaimProofLinks]:
    return [
        ClaimProofLinks(
            claim_id=c.id,
            transaction_id=c.ledger_transaction_id,
            links=build_proof_links(c.ledger_transaction_id, topic_id, network),
        )
        for c in claims
        if c.ledger_transaction_id
    ]


def verification_url(batch_id: str, base_url: str | None = None) -> str:
    base = (base_url or settings.public_base_url).rstrip("/")
    return f"{base}/verify/{batch_id}"


def build_report(
    product: Product,
    claims: Sequence[Claim],
    outcomes: Sequence[VerificationOutcome],
    topic_id: str | None,
    network: str | None,
) -> VerificationReport:
    return VerificationReport(
        product=product,
        claims=list(claims),
        verification=aggregate(claims, outcomes),
        ledger_verifications=list(outcomes),
        proof_links=proof_links_for(claims, topic_id, network),
        qr_code=QRCodeData(batch_id=product.batch_id, verification_url=verification_url(product.batch_id)),
    )


class VerificationAggregator:
    """Runs confirmation for a product's claims and assembles the report."""

    def __init__(self, ledger: LedgerClient, network: str | None = None, topic_id: str | None = None):
        self.ledger = ledger
        self.network = network or settings.hedera_network
        self.topic_id = topic_id or settings.hedera_topic_id

    async def verify(self, product: Product, claims: Sequence[Claim]) -> VerificationReport:
        outcomes = await confirm_claims(claims, self.ledger)
        report = build_report(product, claims, outcomes, self.topic_id, self.network)
        logger.info(
            "Verified %s: %s (%d/%d claims)",
            product.batch_id,
            report.verification.overall_status.value,
            report.verification.verified_claims,
            report.verification.total_claims,
        )
        return report

    async def verify_claim(self, claim: Claim) -> tuple[VerificationOutcome | None, ClaimProofLinks | None]:
        """Single-claim variant; (None, None) when the claim was never notarized."""
        if not claim.ledger_transaction_id:
            return None, None
        outcome = await confirm_claim(claim, self.ledger)
        return outcome, proof_links_for([claim], self.topic_id, self.network)[0]
