"""Per-key query cache with staleness and prefix invalidation."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TypeVar

QueryKey = tuple[object, ...]
T = TypeVar("T")


@dataclass
class _QueryEntry:
    value: object
    stale_at: datetime


class QueryCache:
    """In-process cache of query results keyed by tuples.

    Keys are hierarchical, e.g. ``(user_id, "brew", brew_id)``, so that
    invalidating ``(user_id, "brew")`` drops every cached brew of that user.
    """

    def __init__(self, default_stale_seconds: int = 30) -> None:
        self.default_stale_seconds = default_stale_seconds
        self._entries: dict[QueryKey, _QueryEntry] = {}

    def get(self, key: QueryKey) -> object | None:
        """Return a cached value if it is still fresh."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.stale_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(
        self, key: QueryKey, value: object, stale_seconds: int | None = None
    ) -> None:
        """Store a value that stays fresh for the given number of seconds.

        Stale entries of every key are dropped first.
        """
        seconds = (
            self.default_stale_seconds if stale_seconds is None else stale_seconds
        )
        now = datetime.now(tz=UTC)
        self.prune(now)
        stale_at = now + timedelta(seconds=seconds)
        self._entries[key] = _QueryEntry(value=value, stale_at=stale_at)

    def fetch(
        self,
        key: QueryKey,
        loader: Callable[[], T],
        stale_seconds: int | None = None,
    ) -> T:
        """Return the fresh cached value or load, cache and return a new one."""
        entry = self._entries.get(key)
        if entry is not None and datetime.now(tz=UTC) < entry.stale_at:
            return entry.value  # type: ignore[return-value]
        value = loader()
        self.set(key, value, stale_seconds)
        return value

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with prefix and return the count."""
        size = len(prefix)
        matched = [key for key in self._entries if key[:size] == prefix]
        for key in matched:
            del self._entries[key]
        return len(matched)

    def prune(self, now: datetime | None = None) -> int:
        """Drop stale entries and return how many were removed."""
        now = now or datetime.now(tz=UTC)
        stale = [key for key, entry in self._entries.items() if now >= entry.stale_at]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        """Drop every cached entry."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
