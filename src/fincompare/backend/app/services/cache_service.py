"""Time-bounded in-memory cache for remote listing data."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Any, Callable, Generic, TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_VALIDITY_SECONDS = 5 * 60


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Value stored under ``key`` together with the time it was written."""

    key: str
    value: T
    stored_at: datetime

    def age(self, *, now: datetime) -> timedelta:
        return now - self.stored_at


class CacheStore:
    """Keyed store whose entries are only served inside a validity window.

    Expiry is lazy: a stale entry behaves as a miss on ``get`` but stays in the
    store until it is overwritten, invalidated, or removed by ``purge_expired``.
    """

    def __init__(
        self,
        *,
        validity_seconds: float = DEFAULT_VALIDITY_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if validity_seconds <= 0:
            raise ValueError("validity_seconds must be positive")

        self._validity = timedelta(seconds=validity_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._lock = Lock()

    @property
    def validity_window(self) -> timedelta:
        return self._validity

    def _is_fresh(self, entry: CacheEntry[Any], now: datetime) -> bool:
        return entry.age(now=now) < self._validity

    def get_entry(self, key: str) -> CacheEntry[Any] | None:
        """Return the entry for ``key`` while it is still valid."""

        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry, now):
            _LOGGER.debug("Cache miss for %s", key)
            return None
        return entry

    def get(self, key: str) -> Any | None:
        entry = self.get_entry(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any) -> CacheEntry[Any]:
        entry = CacheEntry(key=key, value=value, stored_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def invalidate(self, key: str | None = None) -> None:
        """Drop ``key`` or, when omitted, every entry."""

        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
        _LOGGER.debug("Invalidated cache entry %s", key or "<all>")

    def purge_expired(self) -> int:
        """Eagerly remove stale entries and return how many were dropped."""

        now = self._clock()
        with self._lock:
            expired = [
                key for key, entry in self._entries.items() if not self._is_fresh(entry, now)
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def status(self) -> list[dict[str, Any]]:
        """Describe every stored entry, fresh or stale."""

        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        return [
            {
                "key": entry.key,
                "age_seconds": int(entry.age(now=now).total_seconds()),
                "expired": not self._is_fresh(entry, now),
                "stored_at": entry.stored_at.isoformat(),
            }
            for entry in entries
        ]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get_entry(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheEntry", "CacheStore", "DEFAULT_VALIDITY_SECONDS"]
