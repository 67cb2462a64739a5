"""Structured error helpers for API responses and provider failures."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = build_error_payload(code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def raise_app_error(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise an AppError with a standardized error shape."""
    raise AppError(status_code, code, message, details)


class ProviderErrorKind(str, Enum):
    """How the orchestrator should treat a failed provider call."""

    UNAVAILABLE = "unavailable"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"


class ProviderError(Exception):
    """Base class for failures raised by an external provider adapter."""

    kind: ProviderErrorKind = ProviderErrorKind.TRANSIENT

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.details = details or {}
        self.retries = 0

    @property
    def retryable(self) -> bool:
        return self.kind in (ProviderErrorKind.RATE_LIMITED, ProviderErrorKind.TRANSIENT)


class ProviderUnavailable(ProviderError):
    """Raised before any network call when a provider is not configured."""

    kind = ProviderErrorKind.UNAVAILABLE


class ProviderAuthError(ProviderError):
    kind = ProviderErrorKind.UNAUTHORIZED


class ProviderRateLimited(ProviderError):
    kind = ProviderErrorKind.RATE_LIMITED

    def __init__(self, provider: str, message: str, *, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(provider, message, **kwargs)
        self.retry_after = retry_after


class ProviderNoMatch(ProviderError):
    """Negative result: the provider answered but has no match for this person."""

    kind = ProviderErrorKind.NOT_FOUND


class ProviderTransient(ProviderError):
    kind = ProviderErrorKind.TRANSIENT


class ParseError(Exception):
    """Raised when an LLM response cannot be split into name/role/probability."""

    def __init__(self, source: str, message: str):
        super().__init__(message)
        self.source = source
