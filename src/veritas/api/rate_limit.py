"""Per-client limit on submissions (each one costs ledger fees)."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from time import time as now_time

from fastapi import Request

from veritas.errors import VeritasError

WINDOW_S = 60.0


@dataclass
class SubmissionRateLimiter:
    limit_per_min: int
    time_fn: callable = now_time
    history: dict[str, deque] = field(default_factory=dict)
    _last_sweep: float = field(default=float("-inf"), repr=False)

    def _sweep(self, now: float) -> None:
        # Forget clients whose newest hit has left the window.
        stale = [k for k, hits in self.history.items() if not hits or now - hits[-1] >= WINDOW_S]
        for k in stale:
            del self.history[k]
        self._last_sweep = now

    def allow(self, key: str) -> bool:
        """Sliding one-minute window per client key."""
        now = self.time_fn()
        if now - self._last_sweep >= WINDOW_S:
            self._sweep(now)
        hits = self.history.setdefault(key, deque())
        while hits and now - hits[0] >= WINDOW_S:
            hits.popleft()
        if len(hits) >= self.limit_per_min:
            return False
        hits.append(now)
        return True


def enforce_submission_limit(request: Request) -> None:
    limiter: SubmissionRateLimiter = request.app.state.submission_limiter
    client_ip = request.client.host if request.client else "unknown"
    if not limiter.allow(client_ip):
        raise VeritasError("Too many submissions, please retry in a minute", status_code=429)
