"""Error taxonomy shared by the backend and the resilient client."""

from __future__ import annotations

from typing import Any, Optional


class VeritasError(Exception):
    """Base error carrying a human-readable message and optional HTTP status."""

    default_status: Optional[int] = None

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.details = details


class ValidationError(VeritasError):
    """Malformed input. Terminal: never retried."""

    default_status = 400


class NotFoundError(VeritasError):
    """No product (or claim) for the requested identifier."""

    default_status = 404


class ServiceError(VeritasError):
    """Any other non-retryable failure reported by the remote service."""

    default_status = 500


class TransientServiceError(VeritasError):
    """Timeouts, 5xx, 429 and unreachable-network failures."""


class LedgerConfirmationError(VeritasError):
    """A single ledger call failed; scoped to one claim."""

    default_status = 502
