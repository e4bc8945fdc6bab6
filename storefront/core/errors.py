"""Application-level exception types.

This module defines domain errors used across adapters, the rate limiter and
the HTTP layer, enabling consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    action: str
    backend: str
    key_prefix: str
    error_type: str
    retry_after: float
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class NotFoundAppError(AppError):
    """Raised when a requested resource does not exist."""


class ConfigurationError(AppError):
    """Raised for invalid static configuration (unknown policy, bad backend).

    Never retried: the caller has to fix the configuration or the call site.
    """


class StoreUnavailableError(AppError):
    """Raised when the key-value store cannot serve a read or write.

    Propagated unchanged through the rate limiter and cache; callers decide
    whether to fail open or closed.
    """
