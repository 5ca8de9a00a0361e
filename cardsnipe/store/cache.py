"""In-memory resolution cache with TTL expiry and a size bound."""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional

from ..utils.log import get_logger


@dataclass(frozen=True)
class _Entry:
    value: Any
    stored_at: float


class ResolutionCache:
    """
    Maps an identity+grade key to a resolved quote or a typed failure.

    Entries are immutable once stored. Reads past ``ttl_seconds`` miss and
    drop the entry; inserts beyond ``max_entries`` evict the least recently
    used entry. A later write for the same key replaces the earlier one.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 5000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.logger = get_logger(__name__)
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[Hashable, _Entry]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = _Entry(value=value, stored_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            self.logger.debug("Cache entry evicted", key=str(evicted))

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and not self._expired(entry, self._clock())

    def __len__(self) -> int:
        return len(self._entries)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        stale = [k for k, e in self._entries.items() if self._expired(e, now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }
