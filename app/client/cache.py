"""
Session-scoped cache of authoritative section lists.

Keyed by the normalized idea (trimmed, lowercased). Entries expire after a
fixed freshness window and are evicted lazily when looked up. An optional
capacity evicts the oldest entry on insert; unbounded by default.
"""
from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable, List, Optional, Sequence, Tuple

from app.services.sections import normalize_idea


class SectionCache:
    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Tuple[str, ...], float]]" = OrderedDict()

    def get(self, idea: str) -> Optional[List[str]]:
        key = normalize_idea(idea)
        entry = self._entries.get(key)
        if entry is None:
            return None
        sections, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return list(sections)

    def put(self, idea: str, sections: Sequence[str]) -> None:
        key = normalize_idea(idea)
        self._entries.pop(key, None)
        self._entries[key] = (tuple(sections), self._clock())
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, idea: object) -> bool:
        # membership ignores freshness; get() is the lookup that honours the TTL
        return isinstance(idea, str) and normalize_idea(idea) in self._entries
