"""A small in-memory cache whose entries expire after a number of seconds."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TTL = 300


@dataclass
class _Entry(Generic[T]):
    item: T
    timestamp: int
    ttl: int

    def is_fresh(self, now: int) -> bool:
        return self.timestamp <= now < self.timestamp + self.ttl


class Cache(Generic[T]):
    """Maps string keys to values that stay readable for a limited time."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: Dict[str, _Entry[T]] = {}

    def _now(self) -> int:
        return int(self._clock())

    def insert(self, key: str, value: T, ttl: Optional[int] = None) -> None:
        """Store ``value`` under ``key``; it lives ``ttl`` seconds (300 by default)."""
        self._entries[key] = _Entry(
            item=value,
            timestamp=self._now(),
            ttl=DEFAULT_TTL if ttl is None else ttl,
        )

    def get(self, key: str) -> Optional[T]:
        """Return the value under ``key`` if it is present and still fresh."""
        entry = self._entries.get(key)
        if entry is None or not entry.is_fresh(self._now()):
            return None
        return entry.item