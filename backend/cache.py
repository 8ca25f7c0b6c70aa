#file: backend/cache.py

import time
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    stored_at: float


class ResultCache:
    """Process-wide key/value store with time-based validity.

    Entries are never swept; a stale entry stays until the next successful
    fetch overwrites it. Callers decide freshness with `is_valid`.
    """

    def __init__(self, ttl: float, name: str = "cache", clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.name = name
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, key: str, value: Any, now: Optional[float] = None) -> CacheEntry:
        entry = CacheEntry(key=key, value=value, stored_at=self.clock() if now is None else now)
        self._entries[key] = entry
        return entry

    def is_valid(self, entry: CacheEntry, now: Optional[float] = None, ttl: Optional[float] = None) -> bool:
        now = self.clock() if now is None else now
        ttl = self.ttl if ttl is None else ttl
        return now - entry.stored_at < ttl

    def lookup(self, key: str) -> Optional[Any]:
        """Return the cached value for `key` if it is still within the TTL."""
        entry = self.get(key)
        if entry is not None and self.is_valid(entry):
            logging.info(f"[{self.name}] Cache hit for {key}, age: {self.clock() - entry.stored_at:.1f} seconds")
            return entry.value
        logging.info(f"[{self.name}] No valid cache entry for {key}")
        return None

    def __len__(self) -> int:
        return len(self._entries)
