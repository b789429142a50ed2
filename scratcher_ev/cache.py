"""In-memory TTL cache for computed game listings."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass(frozen=True)
class CacheMetadata:
    age: float
    ttl: float


@dataclass
class _Entry:
    value: Any
    stored_at: float
    ttl: float


class ResultCache:
    """Thread-safe key/value cache where each entry expires after its own TTL"""

    def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def _live_entry(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= entry.ttl:
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Any:
        with self._lock:
            entry = self._live_entry(key)
        if entry is None:
            logger.debug("Cache miss for %s", key)
            return None
        logger.debug("Cache hit for %s", key)
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = _Entry(value=value, stored_at=self._clock(), ttl=ttl)

    def get_metadata(self, key: str) -> Optional[CacheMetadata]:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return None
            return CacheMetadata(age=self._clock() - entry.stored_at, ttl=entry.ttl)

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when no key is given"""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
