"""
Key-value storage for sliding-window rate limit state.
Maps caller identity -> ordered list of request timestamps (epoch ms).
Thread-safe in-memory implementation; a shared counter service can be
plugged in behind the same interface.
"""
import time
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, List, Optional


class WindowStore(ABC):
    """Abstract interface for rate-limit window storage."""

    @abstractmethod
    def get(self, identity: str) -> List[int]:
        """Return stored timestamps for identity (empty if unknown)."""
        pass

    @abstractmethod
    def set(self, identity: str, timestamps: List[int]) -> None:
        """Replace stored timestamps for identity."""
        pass

    @abstractmethod
    def delete(self, identity: str) -> bool:
        """Forget identity, returns True if it existed."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Forget every identity."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Number of tracked identities."""
        pass


class WindowEntry:
    """Stored timestamps with optional idle expiration."""

    def __init__(self, timestamps: List[int], expires_at: Optional[float]) -> None:
        self.timestamps = timestamps
        self.expires_at = expires_at

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at


class InMemoryWindowStore(WindowStore):
    """
    Process-local window store.

    With idle_ttl_seconds=None identities are kept for the lifetime of the
    process. With a TTL, an identity untouched for that long is forgotten,
    which resets its window. Writes sweep idle identities at most once per
    TTL, so callers that never return are dropped too.
    """

    def __init__(self, idle_ttl_seconds: Optional[float] = None) -> None:
        self._store: Dict[str, WindowEntry] = {}
        self._idle_ttl = idle_ttl_seconds
        self._last_sweep = time.time()
        self._lock = Lock()

    def get(self, identity: str) -> List[int]:
        with self._lock:
            entry = self._store.get(identity)
            if entry is None:
                return []
            if entry.is_expired():
                del self._store[identity]
                return []
            return list(entry.timestamps)

    def set(self, identity: str, timestamps: List[int]) -> None:
        now = time.time()
        expires_at = now + self._idle_ttl if self._idle_ttl else None
        with self._lock:
            self._store[identity] = WindowEntry(list(timestamps), expires_at)
            if self._idle_ttl and now - self._last_sweep >= self._idle_ttl:
                self._purge_expired()
                self._last_sweep = now

    def delete(self, identity: str) -> bool:
        with self._lock:
            return self._store.pop(identity, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """Return number of live identities."""
        with self._lock:
            return sum(1 for entry in self._store.values() if not entry.is_expired())

    def cleanup_expired(self) -> int:
        """Remove idle identities, return count removed."""
        with self._lock:
            return self._purge_expired()

    def _purge_expired(self) -> int:
        # Caller holds self._lock
        expired = [k for k, v in self._store.items() if v.is_expired()]
        for key in expired:
            del self._store[key]
        return len(expired)
