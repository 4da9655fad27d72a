"""Retry policy with exponential backoff and error classification.

Uses tenacity for retries. Classifies errors as retryable or non-retryable
based on exception type and HTTP status codes, and holds the exception
types raised by the ingestion pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, TypeVar

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger()

T = TypeVar("T")

# HTTP status codes that are retryable (transient server errors and rate limiting)
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504, 529}

# HTTP status codes that are non-retryable (client errors)
NON_RETRYABLE_STATUS_CODES = {401, 403, 404}


class RowValidationError(ValueError):
    """Raised when an input row is missing a required field."""


class ResolutionMiss(LookupError):
    """Raised when a company cannot be matched and may not be created."""


class ConflictError(Exception):
    """Raised when the store rejects a write on a uniqueness constraint."""


class TransientStoreError(Exception):
    """Raised when the store is busy, locked or unreachable."""


class SourceReadError(Exception):
    """Raised when an input source cannot be read at all."""


def is_retryable_error(exc: BaseException) -> bool:
    """Determine if an exception is transient and worth retrying."""
    # Never retry validation errors
    if isinstance(exc, (ValidationError, ValueError, TypeError)):
        return False

    # Never retry constraint violations
    if isinstance(exc, ConflictError):
        return False

    if isinstance(exc, TransientStoreError):
        return True

    # Transient network errors
    if isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError, OSError)):
        return True

    # HTTP response errors
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES

    return False


def _log_retry(retry_state: RetryCallState) -> None:
    """Log each retry attempt."""
    logger.warning(
        "retry_attempt",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else "unknown",
    )


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry: attempt cap, exponential backoff and a retryable predicate.

    ``max_attempts`` counts every call including the first one. A policy with
    ``max_attempts <= 1`` calls the wrapped function exactly once.
    """

    max_attempts: int = 2
    backoff_multiplier: float = 1.0
    backoff_min: float = 2.0
    backoff_max: float = 10.0
    retryable: Callable[[BaseException], bool] = field(default=is_retryable_error)

    def decorator(self) -> Callable[[Callable[..., T]], Callable[..., T]]:
        if self.max_attempts <= 1:
            def no_retry_decorator(func: Callable[..., T]) -> Callable[..., T]:
                return func
            return no_retry_decorator

        return retry(
            retry=retry_if_exception(self.retryable),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.backoff_multiplier,
                min=self.backoff_min,
                max=self.backoff_max,
            ),
            before_sleep=_log_retry,
            reraise=True,
        )

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        return self.decorator()(func)(*args, **kwargs)


def with_retry(max_attempts: int = 2) -> Callable:
    """Create a tenacity retry decorator with exponential backoff.

    Backoff: min=2s, max=10s, multiplier=1.
    Only retries on transient errors.
    """
    return RetryPolicy(max_attempts=max_attempts).decorator()


def classify_error(exc: BaseException) -> str:
    """Classify an error into a human-readable category."""
    if isinstance(exc, RowValidationError):
        return "Missing Field"
    if isinstance(exc, ResolutionMiss):
        return "Not Found"
    if isinstance(exc, ConflictError):
        return "Conflict"
    if isinstance(exc, TransientStoreError):
        return "Store Unavailable"
    if isinstance(exc, TimeoutError):
        return "Timeout"
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        if code == 429:
            return "Rate Limiting"
        if code in (401, 403):
            return "Auth Failure"
        return "API Error"
    if isinstance(exc, (httpx.TransportError, ConnectionError, OSError)):
        return "Transient Network"
    if isinstance(exc, (ValidationError, ValueError)):
        return "Data Validation"
    return "Unknown"
