"""Search result caching for LLM company searches."""

from __future__ import annotations

import asyncio
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Protocol

from prospector.core.config import settings
from prospector.utils.time import utc_now


def build_cache_key(provider: str, canonical_params: dict[str, Any]) -> tuple[str, str, str]:
    """Return cache_key, request_hash, canonical_json."""
    canonical_json = json.dumps(canonical_params, sort_keys=True, separators=(",", ":"))
    request_hash = hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
    cache_key = f"{provider}:{request_hash}"
    return cache_key, request_hash, canonical_json


class SearchCache(Protocol):
    async def get(self, key: str) -> Optional[Any]:
        ...

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def purge_expired(self) -> int:
        ...


@dataclass
class CacheEntry:
    value: Any
    expires_at: datetime


class InMemorySearchCache:
    """
    Process-local TTL cache. One instance is created per application.

    Expired entries are dropped lazily on read and in bulk by purge_expired.
    """

    def __init__(self, default_ttl_seconds: Optional[int] = None, clock: Callable[[], datetime] = utc_now):
        self.default_ttl_seconds = (
            default_ttl_seconds if default_ttl_seconds is not None else settings.SEARCH_CACHE_TTL_SECONDS
        )
        self.clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self.clock():
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        expires_at = self.clock() + timedelta(seconds=max(1, ttl))
        async with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def purge_expired(self) -> int:
        now = self.clock()
        async with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)
