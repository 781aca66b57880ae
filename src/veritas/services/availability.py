"""Cached reachability state of the remote Veritas service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from time import time as now_time
from typing import Callable

import httpx

from veritas.config.settings import settings

logger = logging.getLogger(__name__)


class Availability(str, Enum):
    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class AvailabilityRecord:
    status: Availability
    last_checked_at: float


class AvailabilityOracle:
    """
    Decides whether the remote service is worth calling.

    One instance is meant to be shared by every caller in the process so that
    concurrent requests reuse the same health answer. Races between callers
    are last-writer-wins; the state is advisory only.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str | None = None,
        ttl_s: float | None = None,
        timeout_s: float | None = None,
        time_fn: Callable[[], float] = now_time,
    ) -> None:
        self.client = client
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.ttl_s = settings.health_check_interval_s if ttl_s is None else ttl_s
        self.timeout_s = settings.health_timeout_s if timeout_s is None else timeout_s
        self.time_fn = time_fn
        self.status = Availability.UNKNOWN
        self.last_checked_at = 0.0

    def _stamp(self, status: Availability) -> None:
        self.status = status
        self.last_checked_at = self.time_fn()

    async def check(self) -> bool:
        """Return the cached answer while fresh, otherwise hit ``/health``."""
        now = self.time_fn()
        if self.status is not Availability.UNKNOWN and now - self.last_checked_at < self.ttl_s:
            logger.debug("availability cache hit: %s", self.status.value)
            return self.status is Availability.AVAILABLE

        try:
            r = await self.client.get(f"{self.base_url}/health", timeout=self.timeout_s)
        except Exception as e:
            # Bad base URL or a closed client count as unreachable too;
            # cancellation is a BaseException and still propagates.
            logger.warning("Backend health check failed: %s", e)
            self._stamp(Availability.UNAVAILABLE)
            return False

        if r.status_code == 200:
            self._stamp(Availability.AVAILABLE)
            return True

        logger.warning("Backend health check returned HTTP %s", r.status_code)
        self._stamp(Availability.UNAVAILABLE)
        return False

    async def force_refresh(self) -> bool:
        # -inf rather than 0 so injected clocks near zero still miss the cache
        self.last_checked_at = float("-inf")
        return await self.check()

    def mark_unavailable(self) -> None:
        self._stamp(Availability.UNAVAILABLE)

    def mark_available(self) -> None:
        self._stamp(Availability.AVAILABLE)

    def snapshot(self) -> AvailabilityRecord:
        return AvailabilityRecord(status=self.status, last_checked_at=self.last_checked_at)
