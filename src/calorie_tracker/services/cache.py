"""Local offline cache for the last known remote data."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a value, optionally expiring after ttl_seconds."""

    def delete(self, key: str) -> None:
        """Drop a cached value."""

    def delete_prefix(self, prefix: str) -> None:
        """Drop every cached value whose key starts with prefix."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime | None


@dataclass
class InMemoryCache(Cache):
    """In-process cache; entries without a TTL never expire."""

    _entries: dict[str, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int | None = None) -> None:
        """Store a cached value."""
        expires_at = None
        if ttl_seconds is not None:
            expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> None:
        """Drop a cached value if present."""
        self._entries.pop(key, None)

    def delete_prefix(self, prefix: str) -> None:
        """Drop every cached value whose key starts with prefix."""
        for key in [key for key in self._entries if key.startswith(prefix)]:
            self._entries.pop(key, None)
