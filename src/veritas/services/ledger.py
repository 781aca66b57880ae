"""Ledger client abstractions (Hedera Consensus Service)."""

from __future__ import annotations

import itertools
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

import httpx

from veritas.config.settings import settings
from veritas.errors import LedgerConfirmationError, ServiceError
from veritas.models.domain import LedgerConfirmation, NotarizationRecord
from veritas.services.proof_links import mirror_node_url

logger = logging.getLogger(__name__)

TRANSACTION_ID_RE = re.compile(r"^(\d+\.\d+\.\d+)@(\d+)\.(\d+)$")


def is_transaction_id(value: str) -> bool:
    return TRANSACTION_ID_RE.match(value or "") is not None


def to_mirror_transaction_id(transaction_id: str) -> str:
    """``0.0.5@1700000000.000000001`` -> ``0.0.5-1700000000-000000001`` (mirror REST form)."""
    m = TRANSACTION_ID_RE.match(transaction_id)
    if not m:
        return transaction_id
    return f"{m.group(1)}-{m.group(2)}-{m.group(3)}"


class LedgerClient(Protocol):
    """Minimal interface for notarizing and confirming ledger messages."""

    async def notarize(self, message: str) -> NotarizationRecord:
        """Submit a message and return its transaction record."""
        raise NotImplementedError

    async def confirm(self, transaction_id: str) -> LedgerConfirmation:
        """Confirm that a transaction reached consensus."""
        raise NotImplementedError


@dataclass
class StubLedgerClient:
    """Deterministic in-process ledger for tests and local dev."""

    mode = "stub"

    account_id: str = "0.0.6535104"
    topic_id: str = "0.0.6535283"
    failing_ids: frozenset[str] = frozenset()
    unverified_ids: frozenset[str] = frozenset()
    time_fn: callable = time.time
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    async def notarize(self, message: str) -> NotarizationRecord:
        seq = next(self._counter)
        now = self.time_fn()
        seconds = int(now)
        transaction_id = f"{self.account_id}@{seconds}.{seq:09d}"
        return NotarizationRecord(
            transaction_id=transaction_id,
            consensus_timestamp=datetime.fromtimestamp(now, tz=timezone.utc),
            topic_id=self.topic_id,
            sequence_number=seq,
        )

    async def confirm(self, transaction_id: str) -> LedgerConfirmation:
        if transaction_id in self.failing_ids:
            raise LedgerConfirmationError(f"Failed to verify transaction {transaction_id}")
        if transaction_id in self.unverified_ids or not is_transaction_id(transaction_id):
            return LedgerConfirmation(verified=False)
        m = TRANSACTION_ID_RE.match(transaction_id)
        return LedgerConfirmation(
            verified=True,
            consensus_timestamp=f"{m.group(2)}.{m.group(3)}",
            result="SUCCESS",
        )


class HederaLedgerClient:
    """
    Confirms transactions through the Hedera mirror node REST API.

    Confirm-only: signing and submitting topic messages needs an operator
    account and key, which stay with the external notarization service.
    `notarize` refuses instead of pretending.
    """

    mode = "confirm-only"

    def __init__(
        self,
        client: httpx.AsyncClient,
        network: str | None = None,
        topic_id: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        self.client = client
        self.network = network or settings.hedera_network
        self.topic_id = topic_id or settings.hedera_topic_id
        self.timeout_s = settings.ledger_timeout_s if timeout_s is None else timeout_s

    async def notarize(self, message: str) -> NotarizationRecord:
        raise ServiceError("Hedera message submission is not enabled in this environment.")

    async def confirm(self, transaction_id: str) -> LedgerConfirmation:
        url = f"{mirror_node_url(self.network)}/api/v1/transactions/{to_mirror_transaction_id(transaction_id)}"
        try:
            r = await self.client.get(url, timeout=self.timeout_s)
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPStatusError as e:
            raise LedgerConfirmationError(
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise LedgerConfirmationError(f"Failed to verify transaction {transaction_id}: {e}") from e

        txs = payload.get("transactions") or [payload]
        tx = txs[0] if txs else {}
        result = tx.get("result")
        return LedgerConfirmation(
            verified=result in (None, "SUCCESS"),
            consensus_timestamp=tx.get("consensus_timestamp"),
            result=result,
        )


def get_ledger_client(client: httpx.AsyncClient | None = None) -> LedgerClient:
    """Factory for ledger clients based on settings."""
    provider = settings.ledger_provider.lower()
    if provider == "stub":
        return StubLedgerClient(topic_id=settings.hedera_topic_id)
    if provider == "hedera":
        if not settings.hedera_account_id:
            raise RuntimeError("VERITAS_HEDERA_ACCOUNT_ID is required for the hedera provider.")
        return HederaLedgerClient(client or httpx.AsyncClient(), network=settings.hedera_network)
    raise ValueError(f"Unknown ledger provider: {settings.ledger_provider}")
