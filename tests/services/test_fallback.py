import random

from veritas.models.domain import OverallStatus, ProductInput
from veritas.services.fallback import FallbackSynthesizer
from veritas.services.ledger import is_transaction_id


def _synth():
    return FallbackSynthesizer(time_fn=lambda: 1_718_035_200.5, rand=random.Random(3))


def test_curated_fully_verified_product():
    report = _synth().verification_fallback("VRT-2024-123456")
    assert report.product.product_name == "Organic Ethiopian Single Origin Coffee"
    assert report.verification.overall_status is OverallStatus.VERIFIED
    assert report.verification.verification_percentage == 100
    assert len(report.proof_links) == 3


def test_curated_partially_verified_product():
    report = _synth().verification_fallback("VRT-2024-789012")
    v = report.verification
    assert v.overall_status is OverallStatus.PARTIALLY_VERIFIED
    assert (v.total_claims, v.claims_with_ledger_data, v.verified_claims) == (3, 2, 1)
    assert v.verification_percentage == 33


def test_unknown_batch_gets_generic_demo():
    report = _synth().verification_fallback("COFFEE-2024-1001")
    assert report.product.batch_id == "COFFEE-2024-1001"
    assert report.product.product_name == "Demo Product"
    assert len(report.claims) == 1
    assert report.claims[0].claim_type == "demo"
    assert is_transaction_id(report.claims[0].ledger_transaction_id)
    assert report.verification.overall_status is OverallStatus.VERIFIED
    assert report.verification.verification_percentage == 100
    assert report.qr_code.batch_id == "COFFEE-2024-1001"


def test_submission_fallback_mirrors_input():
    product_input = ProductInput(
        product_name="Organic Coffee",
        supplier_name="Highland Co",
        claims=[
            {"claim_type": "organic", "description": "USDA organic certified"},
            {"claim_type": "fair-trade", "description": "Fair trade certified"},
        ],
    )
    report = _synth().submission_fallback(product_input)

    assert report.product.batch_id.startswith("ORGANIC-1718035200500-")
    assert report.product.supplier_name == "Highland Co"
    assert [c.claim_type for c in report.claims] == ["organic", "fair-trade"]
    assert all(c.product_id == report.product.id for c in report.claims)
    assert all(is_transaction_id(c.ledger_transaction_id) for c in report.claims)

    assert [r.type for r in report.ledger_results] == ["PRODUCT", "CLAIM", "CLAIM"]
    assert all(r.success for r in report.ledger_results)
    assert [r.claim_id for r in report.ledger_results[1:]] == [c.id for c in report.claims]
    assert report.qr_code.verification_url.endswith(f"/verify/{report.product.batch_id}")
