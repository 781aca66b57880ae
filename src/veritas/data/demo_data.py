"""Curated demo products shown when the backend cannot be reached."""

from __future__ import annotations

DEMO_ACCOUNT_ID = "0.0.6535104"
DEMO_TOPIC_ID = "0.0.6535283"

# Keyed by batch ID. `verified` lists the claim ids the ledger confirms.
DEMO_VERIFICATIONS: dict[str, dict] = {
    "VRT-2024-123456": {
        "product": {
            "id": "demo-product-1",
            "batch_id": "VRT-2024-123456",
            "product_name": "Organic Ethiopian Single Origin Coffee",
            "supplier_name": "Highland Coffee Cooperative",
            "description": (
                "Premium coffee beans grown at 2,000m altitude in the Ethiopian highlands "
                "using traditional farming methods passed down through generations."
            ),
            "created_at": "2024-01-15T10:30:00Z",
        },
        "claims": [
            {
                "id": "demo-claim-1",
                "product_id": "demo-product-1",
                "claim_type": "organic",
                "description": "Certified organic by USDA and EU standards. Grown without synthetic pesticides, herbicides, or fertilizers.",
                "ledger_transaction_id": "0.0.12345@1642248600.123456789",
                "ledger_timestamp": "2024-01-15T10:30:01Z",
                "created_at": "2024-01-15T10:30:00Z",
            },
            {
                "id": "demo-claim-2",
                "product_id": "demo-product-1",
                "claim_type": "fair-trade",
                "description": "Direct trade partnership ensures farmers receive 15% above fair trade minimum price.",
                "ledger_transaction_id": "0.0.12345@1642248601.123456789",
                "ledger_timestamp": "2024-01-15T10:30:02Z",
                "created_at": "2024-01-15T10:30:00Z",
            },
            {
                "id": "demo-claim-3",
                "product_id": "demo-product-1",
                "claim_type": "carbon-neutral",
                "description": "Carbon footprint offset through reforestation projects in Ethiopia.",
                "ledger_transaction_id": "0.0.12345@1642248602.123456789",
                "ledger_timestamp": "2024-01-15T10:30:03Z",
                "created_at": "2024-01-15T10:30:00Z",
            },
        ],
        "verified": ["demo-claim-1", "demo-claim-2", "demo-claim-3"],
    },
    "VRT-2024-789012": {
        "product": {
            "id": "demo-product-2",
            "batch_id": "VRT-2024-789012",
            "product_name": "Handcrafted Bamboo Yoga Mat",
            "supplier_name": "EcoZen Wellness Co.",
            "description": "Sustainable yoga mat made from organic bamboo fiber with natural rubber base.",
            "created_at": "2024-02-03T08:15:00Z",
        },
        "claims": [
            {
                "id": "demo-claim-4",
                "product_id": "demo-product-2",
                "claim_type": "sustainable",
                "description": "Made from 100% renewable bamboo that regrows within 3 years.",
                "ledger_transaction_id": "0.0.12345@1706948100.000000001",
                "ledger_timestamp": "2024-02-03T08:15:01Z",
                "created_at": "2024-02-03T08:15:00Z",
            },
            {
                "id": "demo-claim-5",
                "product_id": "demo-product-2",
                "claim_type": "cruelty-free",
                "description": "No animal products or testing involved in production.",
                "ledger_transaction_id": "0.0.12345@1706948101.000000002",
                "created_at": "2024-02-03T08:15:00Z",
            },
            {
                "id": "demo-claim-6",
                "product_id": "demo-product-2",
                "claim_type": "recyclable",
                "description": "Fully biodegradable components; pending ledger submission.",
                "created_at": "2024-02-03T08:15:00Z",
            },
        ],
        "verified": ["demo-claim-4"],
    },
}

DEMO_BATCH_IDS = list(DEMO_VERIFICATIONS)
