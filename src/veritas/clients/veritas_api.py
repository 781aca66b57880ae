"""Resilient client for the Veritas backend.

Submissions and verifications degrade to synthesized demo data when the
backend is down; reads without a safe substitute raise instead.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from veritas.config.settings import settings
from veritas.errors import ValidationError
from veritas.models.domain import (
    PrefixStatistics,
    ProductDetail,
    ProductInput,
    SubmissionReport,
    VerificationReport,
)
from veritas.models.results import ServiceResult
from veritas.services.availability import AvailabilityOracle, AvailabilityRecord
from veritas.services.batch_id import generate_batch_id, is_valid_batch_id
from veritas.services.executor import ResilientRequestExecutor
from veritas.services.fallback import FallbackSynthesizer


T = TypeVar("T")

__all__ = ["VeritasApiClient", "generate_batch_id", "is_valid_batch_id"]


class VeritasApiClient:
    """
    Async client wiring oracle, executor and synthesizer together.

    Share one instance (or at least one oracle) per process so every caller
    sees the same availability cache.
    """

    def __init__(
        self,
        base_url: str | None = None,
        http: httpx.AsyncClient | None = None,
        oracle: AvailabilityOracle | None = None,
        executor: ResilientRequestExecutor | None = None,
        synthesizer: FallbackSynthesizer | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=settings.request_timeout_s)
        self.oracle = oracle or AvailabilityOracle(self.http, base_url=self.base_url)
        self.executor = executor or ResilientRequestExecutor(self.oracle)
        self.synthesizer = synthesizer or FallbackSynthesizer(
            network=settings.hedera_network,
            topic_id=settings.hedera_topic_id,
        )

    async def __aenter__(self) -> "VeritasApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def _request(self, method: str, path: str, model: Any, json: Any = None) -> Any:
        r = await self.http.request(method, f"{self.base_url}{path}", json=json)
        r.raise_for_status()
        payload = r.json()
        data = payload.get("data", payload) if isinstance(payload, dict) else payload
        return TypeAdapter(model).validate_python(data)

    async def submit_product(self, product_input: ProductInput | dict) -> ServiceResult[SubmissionReport]:
        if not isinstance(product_input, ProductInput):
            try:
                product_input = ProductInput.model_validate(product_input)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Validation error",
                    details=[{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()],
                ) from e

        body = product_input.model_dump(mode="json")
        return await self.executor.execute(
            lambda: self._request("POST", "/api/products", SubmissionReport, json=body),
            fallback=self.synthesizer.submission_fallback(product_input),
        )

    async def verify_product(self, batch_id: str) -> ServiceResult[VerificationReport]:
        return await self.executor.execute(
            lambda: self._request("GET", f"/api/verify/{batch_id}", VerificationReport),
            fallback=self.synthesizer.verification_fallback(batch_id),
        )

    async def get_product(self, batch_id: str) -> ProductDetail:
        result = await self.executor.execute(
            lambda: self._request("GET", f"/api/products/{batch_id}", ProductDetail)
        )
        return result.data

    async def get_batch_stats(self) -> list[PrefixStatistics]:
        result = await self.executor.execute(
            lambda: self._request("GET", "/api/batch-stats", list[PrefixStatistics])
        )
        return result.data

    def backend_status(self) -> AvailabilityRecord:
        return self.oracle.snapshot()

    async def refresh_backend_status(self) -> bool:
        return await self.oracle.force_refresh()
