"""
Base adapter interface for email enrichment providers.

Every provider takes a person + company and returns at most one email with
a confidence value. Failures are raised as ``ProviderError`` subclasses and
classified so the orchestrator can decide whether to move on or retry.
Adapters never retry on their own.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol

import httpx

from prospector.core.config import settings
from prospector.errors import (
    ProviderAuthError,
    ProviderNoMatch,
    ProviderRateLimited,
    ProviderTransient,
    ProviderUnavailable,
)

# (method, url, params, json_body, headers) -> (status_code, payload, response_headers)
Fetcher = Callable[..., Awaitable[tuple[int, Any, dict[str, str]]]]


@dataclass
class KnownContact:
    """Another person at the same company whose email is already on file."""

    name: str
    email: str


@dataclass
class ProviderLookup:
    contact_name: str
    company_name: str
    domain: Optional[str] = None
    known_contacts: list[KnownContact] = field(default_factory=list)


@dataclass
class ProviderResult:
    email: Optional[str] = None
    confidence: int = 0
    title: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.email and self.email.strip())


class EmailProvider(Protocol):
    """Interface for provider adapters."""

    key: str
    search_type: str

    async def lookup(self, request: ProviderLookup) -> ProviderResult:
        ...


def parse_retry_after(headers: dict[str, str]) -> Optional[float]:
    for name, value in (headers or {}).items():
        if name.lower() == "retry-after":
            try:
                return max(0.0, float(value))
            except (TypeError, ValueError):
                return None
    return None


def raise_for_provider_status(provider: str, status_code: int, payload: Any, headers: dict[str, str]) -> None:
    """Translate a non-2xx response into the provider error taxonomy."""
    if 200 <= status_code < 300:
        return
    details = {"response": payload} if isinstance(payload, dict) else None
    if status_code in (401, 403):
        raise ProviderAuthError(provider, "Provider rejected credentials", status_code=status_code, details=details)
    if status_code == 429:
        raise ProviderRateLimited(
            provider,
            "Provider rate limit exceeded",
            retry_after=parse_retry_after(headers),
            status_code=status_code,
            details=details,
        )
    if status_code >= 500 or status_code == 0:
        raise ProviderTransient(provider, "Provider server error", status_code=status_code, details=details)
    raise ProviderNoMatch(provider, "Provider returned no match", status_code=status_code, details=details)


class HttpEmailProvider:
    """Shared plumbing for providers backed by a JSON HTTP API."""

    key: str = ""
    search_type: str = ""
    api_key_setting: str = ""

    def __init__(
        self,
        *,
        client: Optional[httpx.AsyncClient] = None,
        fetcher: Optional[Fetcher] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.fetcher = fetcher or self._http_request
        self._api_key = api_key
        self.timeout = timeout if timeout is not None else settings.PROVIDER_TIMEOUT_SECONDS

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or getattr(settings, self.api_key_setting, None)

    def validate_config(self) -> str:
        """Fail fast, before any network call, when the API key is missing."""
        api_key = self.api_key
        if not api_key:
            raise ProviderUnavailable(
                self.key,
                "Provider API key not configured",
                details={"missing": [self.api_key_setting]},
            )
        return api_key

    async def _http_request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> tuple[int, Any, dict[str, str]]:
        try:
            if self.client is not None:
                resp = await self.client.request(
                    method, url, params=params, json=json_body, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.request(method, url, params=params, json=json_body, headers=headers)
        except httpx.TimeoutException as exc:
            raise ProviderTransient(self.key, f"Request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ProviderTransient(self.key, f"Transport error: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            payload = {"text": resp.text}
        return resp.status_code, payload, dict(resp.headers)

    def raise_for_status(self, status_code: int, payload: Any, headers: dict[str, str]) -> None:
        raise_for_provider_status(self.key, status_code, payload, headers)

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        status_code, payload, response_headers = await self.fetcher(
            method, url, params=params, json_body=json_body, headers=headers
        )
        self.raise_for_status(status_code, payload, response_headers)
        return payload

    async def lookup(self, request: ProviderLookup) -> ProviderResult:  # pragma: no cover - interface
        raise NotImplementedError


def scale_confidence(raw: Any, default: int) -> int:
    """Provider scores come as 0-1 fractions or 0-100 integers."""
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if 0 < value <= 1:
        value *= 100
    return int(max(0, min(100, round(value))))


__all__ = [
    "EmailProvider",
    "Fetcher",
    "HttpEmailProvider",
    "KnownContact",
    "ProviderLookup",
    "ProviderResult",
    "parse_retry_after",
    "raise_for_provider_status",
    "scale_confidence",
]
