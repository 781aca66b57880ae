"""Bounded-retry execution of remote calls with fallback resolution."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from veritas.config.settings import settings
from veritas.errors import (
    NotFoundError,
    ServiceError,
    TransientServiceError,
    ValidationError,
    VeritasError,
)
from veritas.models.results import BackendResult, DemoResult, ServiceResult
from veritas.services.availability import AvailabilityOracle

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

MISSING: Any = object()


def response_message(response: httpx.Response) -> str:
    """Human-readable message from an error response body."""
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}".rstrip(": ")
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or fallback

    if isinstance(payload, str):
        return payload or fallback
    if not isinstance(payload, dict):
        return fallback
    err = payload.get("error")
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(err, str) and err:
        return err
    if payload.get("message"):
        return str(payload["message"])
    if isinstance(payload.get("detail"), str):
        return payload["detail"]
    return fallback


def _response_details(response: httpx.Response) -> Any:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return payload["error"].get("details")
    return None


def classify_error(exc: BaseException) -> VeritasError:
    """
    Map any failure from a remote call onto the error taxonomy.

    Only TransientServiceError is retryable.
    """
    if isinstance(exc, VeritasError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        message = response_message(exc.response)
        details = _response_details(exc.response)
        if status in RETRYABLE_STATUS_CODES:
            return TransientServiceError(message, status_code=status, details=details)
        if status in (400, 422):
            return ValidationError(message, status_code=status, details=details)
        if status == 404:
            return NotFoundError(message, status_code=status, details=details)
        return ServiceError(message, status_code=status, details=details)

    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return TransientServiceError("Request timed out. Please try again.")

    if isinstance(exc, httpx.TransportError):
        return TransientServiceError(f"Network error - please check your connection ({exc})")

    return ServiceError(str(exc) or type(exc).__name__)


def is_retryable(exc: BaseException) -> bool:
    return isinstance(classify_error(exc), TransientServiceError)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "Remote request failed (%s), retrying in %.1fs (attempt %d)",
        exc,
        delay,
        retry_state.attempt_number,
    )


class ResilientRequestExecutor:
    """
    Runs a remote operation with bounded retries and always reports provenance.

    Callers that pass a fallback value never see an exception: every failure
    path resolves to a DemoResult carrying the fallback.
    """

    def __init__(
        self,
        oracle: AvailabilityOracle,
        max_retries: int | None = None,
        base_delay_s: float | None = None,
        timeout_s: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.oracle = oracle
        self.max_retries = settings.max_retries if max_retries is None else max_retries
        self.base_delay_s = settings.retry_base_delay_s if base_delay_s is None else base_delay_s
        self.timeout_s = settings.request_timeout_s if timeout_s is None else timeout_s
        self.sleep = sleep

    def _retrying(self) -> AsyncRetrying:
        # wait = base * 2**(n-1) for the n-th retry: 1s, 2s, 4s
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay_s, exp_base=2, min=0),
            retry=retry_if_exception(is_retryable),
            sleep=self.sleep,
            before_sleep=_log_retry,
            reraise=True,
        )

    async def _run(self, operation: Callable[[], Awaitable[T]]) -> T:
        async for attempt in self._retrying():
            with attempt:
                return await asyncio.wait_for(operation(), timeout=self.timeout_s)
        raise AssertionError("unreachable")  # pragma: no cover

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        fallback: T = MISSING,
    ) -> ServiceResult[T]:
        has_fallback = fallback is not MISSING

        if not await self.oracle.check() and has_fallback:
            return DemoResult(data=fallback, reason="backend unavailable")

        try:
            data = await self._run(operation)
        except Exception as exc:
            error = classify_error(exc)
            if isinstance(error, TransientServiceError):
                self.oracle.mark_unavailable()
                logger.warning("Remote request failed after retries: %s", error.message)
                if has_fallback:
                    return DemoResult(
                        data=fallback,
                        reason="retries exhausted",
                        error=error.message,
                        status_code=error.status_code,
                    )
                raise TransientServiceError(
                    error.message, status_code=error.status_code, details=error.details
                ) from exc

            # The service answered, it just refused the request.
            self.oracle.mark_available()
            logger.info("Remote request rejected: %s", error.message)
            if has_fallback:
                return DemoResult(
                    data=fallback,
                    reason="request rejected",
                    error=error.message,
                    status_code=error.status_code,
                )
            if error is exc:
                raise
            raise error from exc

        self.oracle.mark_available()
        return BackendResult(data=data)


def error_text(result: ServiceResult[Any]) -> Optional[str]:
    """Banner text for degraded-mode results, None for real data."""
    if isinstance(result, DemoResult):
        if result.error:
            return f"Showing demo data ({result.reason}): {result.error}"
        return f"Showing demo data ({result.reason})"
    return None
