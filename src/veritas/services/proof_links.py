from __future__ import annotations

from veritas.models.domain import ProofLinks

MAINNET_MIRROR_URL = "https://mainnet-public.mirrornode.hedera.com"
TESTNET_MIRROR_URL = "https://testnet.mirrornode.hedera.com"
HASHSCAN_URL = "https://hashscan.io"


def normalize_network(network: str | None) -> str:
    return "mainnet" if (network or "").strip().lower() == "mainnet" else "testnet"


def mirror_node_url(network: str | None) -> str:
    return MAINNET_MIRROR_URL if normalize_network(network) == "mainnet" else TESTNET_MIRROR_URL


def build_proof_links(transaction_id: str, topic_id: str | None, network: str | None) -> ProofLinks:
    """
    Human-followable URLs for a ledger transaction.

    Display convenience only: identifiers are interpolated as given.
    """
    net = normalize_network(network)
    mirror = mirror_node_url(net)
    return ProofLinks(
        transaction=f"{mirror}/api/v1/transactions/{transaction_id}",
        topic=f"{mirror}/api/v1/topics/{topic_id}/messages",
        explorer=f"{HASHSCAN_URL}/{net}/transaction/{transaction_id}",
        explorer_topic=f"{HASHSCAN_URL}/{net}/topic/{topic_id}",
    )
