"""In-memory TTL cache for repository audit results."""

import copy
import hashlib
import logging
import threading
import time
from typing import Any, Callable, Optional

from .models import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600.0


def compute_key(identity: str) -> str:
    """MD5 hex digest of a request identity. A dedup key, not a security boundary."""
    return hashlib.md5(identity.encode("utf-8")).hexdigest()


class TTLCache:
    """Process-local key/value store with lazy expiry on read.

    Values are deep-copied on the way in and on the way out, so callers never
    share state with the cache. Capacity is unbounded.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def compute_key(identity: str) -> str:
        return compute_key(identity)

    def get(self, key: str) -> Optional[Any]:
        """Return a copy of the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return entry.copy_value()

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store a copy of value under key, replacing any entry and resetting its TTL."""
        ttl = self.default_ttl if ttl is None else ttl
        entry = CacheEntry(
            key=key,
            value=copy.deepcopy(value),
            created_at=self._clock(),
            ttl=ttl,
        )
        with self._lock:
            self._entries[key] = entry

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def __len__(self) -> int:
        now = self._clock()
        with self._lock:
            return sum(1 for entry in self._entries.values() if not entry.is_expired(now))
