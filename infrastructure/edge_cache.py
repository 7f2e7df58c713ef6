import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from domain.hash_constants import EDGE_CACHE_MAX_AGE_SECONDS


@dataclass(frozen=True)
class CachedBlob:
    content: bytes
    content_type: str
    cached_at: float


class EdgeCache:
    """
    Read-through cache for fetched blobs, keyed by identifier.

    Entries stay fresh for a fixed window and are never invalidated by
    writes: the bytes behind an identifier are content-addressed and not
    expected to change. Only successful reads should be put here.
    """

    def __init__(
        self,
        max_age_seconds: int = EDGE_CACHE_MAX_AGE_SECONDS,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_age_seconds = max_age_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CachedBlob]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, identifier: str) -> Optional[CachedBlob]:
        """Return the fresh cached blob for an identifier, dropping it if stale."""
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return None
            if self._clock() - entry.cached_at >= self.max_age_seconds:
                del self._entries[identifier]
                return None
            return entry

    def put(self, identifier: str, content: bytes, content_type: str) -> None:
        with self._lock:
            self._entries.pop(identifier, None)
            self._entries[identifier] = CachedBlob(content, content_type, self._clock())
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def __contains__(self, identifier: str) -> bool:
        return self.get(identifier) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
