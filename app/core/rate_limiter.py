"""
Sliding-window rate limiter keyed by caller identity.

Every check re-derives the live window by pruning expired timestamps, so a
burst straddling a fixed boundary cannot double the admitted rate.
"""
import hashlib
import logging
import time
from threading import Lock
from typing import Callable, Optional

from fastapi import Request

from app.core.metrics import RATE_LIMIT_DECISIONS
from app.core.window_store import InMemoryWindowStore, WindowStore
from app.models.schemas import RateLimitResult

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Current wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """
    Per-identity sliding-window admission control.

    Usage:
        limiter = SlidingWindowRateLimiter("api", max_requests=100, window_ms=60_000)
        result = limiter.is_allowed(identity)
        if not result.allowed:
            raise RateLimitError(result.reset_at, now_ms())
    """

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_ms: int,
        store: Optional[WindowStore] = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if max_requests <= 0 or window_ms <= 0:
            raise ValueError("max_requests and window_ms must be positive")
        self._name = name
        self._max_requests = max_requests
        self._window_ms = window_ms
        self._store = store or InMemoryWindowStore()
        self._clock = clock
        # Guards read-prune-append-write so concurrent checks cannot both pass
        self._lock = Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def now(self) -> int:
        """Current time on this limiter's clock."""
        return self._clock()

    def is_allowed(self, identity: str) -> RateLimitResult:
        """
        Check and record a request for identity.

        Denied attempts are not recorded, so a caller hammering a closed
        window does not extend it.
        """
        with self._lock:
            now = self._clock()
            live = [
                ts for ts in self._store.get(identity)
                if now - ts < self._window_ms
            ]

            if len(live) >= self._max_requests:
                # Persist the pruned list so the store never holds stale entries
                self._store.set(identity, live)
                RATE_LIMIT_DECISIONS.labels(limiter=self._name, outcome="denied").inc()
                logger.warning(
                    f"Rate limit exceeded: limiter={self._name}",
                    extra={"identity": identity},
                )
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_at=min(live) + self._window_ms,
                )

            live.append(now)
            self._store.set(identity, live)

        RATE_LIMIT_DECISIONS.labels(limiter=self._name, outcome="allowed").inc()
        return RateLimitResult(
            allowed=True,
            remaining=self._max_requests - len(live),
            reset_at=now + self._window_ms,
        )

    def reset(self, identity: str) -> None:
        """Forget one identity's history."""
        with self._lock:
            self._store.delete(identity)

    def clear_all(self) -> None:
        """Forget every identity's history."""
        with self._lock:
            self._store.clear()

    def tracked_identities(self) -> int:
        return self._store.size()


def get_identifier(request: Request, user_id: Optional[str] = None) -> str:
    """
    Derive the rate-limit identity for a request.

    Priority: user id > first X-Forwarded-For hop > X-Real-IP > user agent hash.
    Headers are client-controlled, so anonymous identities are best effort.
    """
    if user_id:
        return user_id

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    user_agent = request.headers.get("user-agent") or "unknown"
    digest = hashlib.md5(user_agent.encode()).hexdigest()[:12]
    return f"ua-{digest}"
