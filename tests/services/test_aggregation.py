import asyncio
from datetime import datetime

import pytest

from veritas.errors import LedgerConfirmationError
from veritas.models.domain import Claim, OverallStatus, Product, VerificationOutcome
from veritas.services.aggregation import VerificationAggregator, aggregate, confirm_claim, confirm_claims
from veritas.services.ledger import StubLedgerClient

NOW = datetime(2024, 6, 1, 12, 0, 0)


def _claim(i: int, tx: str | None = None) -> Claim:
    return Claim(
        id=f"c{i}",
        product_id="p1",
        claim_type="organic",
        description="Certified organic",
        ledger_transaction_id=tx,
        created_at=NOW,
    )


def _outcome(claim: Claim, verified: bool) -> VerificationOutcome:
    return VerificationOutcome(claim_id=claim.id, transaction_id=claim.ledger_transaction_id, verified=verified)


def test_no_claims():
    agg = aggregate([], [])
    assert agg.overall_status is OverallStatus.NO_CLAIMS
    assert agg.verification_percentage == 0


def test_no_blockchain_data():
    agg = aggregate([_claim(1), _claim(2)], [])
    assert agg.overall_status is OverallStatus.NO_BLOCKCHAIN_DATA
    assert agg.claims_with_ledger_data == 0
    assert agg.verification_percentage == 0


def test_all_ledger_claims_verified():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2, "0.0.1@1.2"), _claim(3, "0.0.1@1.3")]
    agg = aggregate(claims, [_outcome(c, True) for c in claims])
    assert agg.overall_status is OverallStatus.VERIFIED
    assert agg.verification_percentage == 100


def test_partially_verified_one_of_three():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2, "0.0.1@1.2"), _claim(3)]
    agg = aggregate(claims, [_outcome(claims[0], True), _outcome(claims[1], False)])
    assert agg.overall_status is OverallStatus.PARTIALLY_VERIFIED
    assert agg.total_claims == 3
    assert agg.claims_with_ledger_data == 2
    assert agg.verified_claims == 1
    assert agg.verification_percentage == 33


def test_verified_ignores_claims_never_sent_to_ledger():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2)]
    agg = aggregate(claims, [_outcome(claims[0], True)])
    assert agg.overall_status is OverallStatus.VERIFIED
    assert agg.verification_percentage == 50


def test_unverified():
    claims = [_claim(1, "0.0.1@1.1")]
    agg = aggregate(claims, [_outcome(claims[0], False)])
    assert agg.overall_status is OverallStatus.UNVERIFIED


def test_percentage_rounds_half_up():
    claims = [_claim(i, f"0.0.1@1.{i}") for i in range(8)]
    # 1/8 = 12.5 -> 13
    agg = aggregate(claims, [_outcome(claims[0], True)])
    assert agg.verification_percentage == 13


@pytest.mark.parametrize("n_verified", range(0, 6))
def test_percentage_bounds(n_verified):
    claims = [_claim(i, f"0.0.1@1.{i}") for i in range(5)] + [_claim(9)]
    outcomes = [_outcome(c, i < n_verified) for i, c in enumerate(claims[:5])]
    agg = aggregate(claims, outcomes)
    assert 0 <= agg.verification_percentage <= 100
    assert agg.verified_claims <= agg.claims_with_ledger_data <= agg.total_claims


def test_duplicate_and_stray_outcomes_do_not_inflate():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2, "0.0.1@1.2")]
    stray = VerificationOutcome(claim_id="other", transaction_id="0.0.1@9.9", verified=True)
    agg = aggregate(claims, [_outcome(claims[0], True), _outcome(claims[0], True), stray])
    assert agg.verified_claims == 1
    assert agg.overall_status is OverallStatus.PARTIALLY_VERIFIED


def test_aggregate_is_idempotent():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2)]
    outcomes = [_outcome(claims[0], True)]
    assert aggregate(claims, outcomes) == aggregate(claims, outcomes)


def test_confirm_claims_isolates_failures():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2, "0.0.1@1.2"), _claim(3)]
    ledger = StubLedgerClient(failing_ids=frozenset({"0.0.1@1.2"}))

    outcomes = asyncio.run(confirm_claims(claims, ledger))
    assert [o.claim_id for o in outcomes] == ["c1", "c2"]
    assert outcomes[0].verified is True
    assert outcomes[1].verified is False
    assert "Failed to verify" in outcomes[1].error


def test_confirm_claims_timeout_is_recorded():
    class SlowLedger:
        async def confirm(self, transaction_id):
            await asyncio.sleep(1)

    outcome = asyncio.run(confirm_claim(_claim(1, "0.0.1@1.1"), SlowLedger(), timeout_s=0.01))
    assert outcome.verified is False
    assert outcome.error == "Ledger confirmation timed out"


def test_aggregator_builds_report_with_links():
    product = Product(id="p1", batch_id="COFFEE-1-ABCDEF", product_name="Coffee", supplier_name="Co", created_at=NOW)
    claims = [_claim(1, "0.0.1@1.1"), _claim(2)]
    report = asyncio.run(VerificationAggregator(StubLedgerClient(), network="testnet", topic_id="0.0.9").verify(product, claims))

    assert report.verification.overall_status is OverallStatus.VERIFIED
    assert [p.claim_id for p in report.proof_links] == ["c1"]
    assert report.proof_links[0].links.explorer == "https://hashscan.io/testnet/transaction/0.0.1@1.1"
    assert report.qr_code.verification_url.endswith("/verify/COFFEE-1-ABCDEF")


def test_ledger_error_type_is_veritas_error():
    assert LedgerConfirmationError("x").status_code == 502


def test_two_of_three_claims_notarized_and_confirmed():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2, "0.0.1@1.2"), _claim(3)]
    outcomes = asyncio.run(confirm_claims(claims, StubLedgerClient()))
    agg = aggregate(claims, outcomes)

    assert agg.overall_status is OverallStatus.VERIFIED
    assert agg.claims_with_ledger_data == 2
    # percentage is over all claims, including the one never notarized
    assert agg.verification_percentage == 67


def test_single_failing_confirmation_is_unverified():
    claims = [_claim(1, "0.0.1@1.1"), _claim(2)]
    ledger = StubLedgerClient(failing_ids=frozenset({"0.0.1@1.1"}))
    agg = aggregate(claims, asyncio.run(confirm_claims(claims, ledger)))

    assert agg.overall_status is OverallStatus.UNVERIFIED
    assert agg.verification_percentage == 0


def test_outcomes_ignored_without_ledger_data():
    claims = [_claim(1), _claim(2), _claim(3)]
    bogus = [VerificationOutcome(claim_id=c.id, transaction_id="0.0.1@1.1", verified=True) for c in claims]
    agg = aggregate(claims, bogus)
    assert agg.overall_status is OverallStatus.NO_BLOCKCHAIN_DATA
    assert agg.verified_claims == 0
