"""Core infrastructure components."""
from .circuit_breaker import CircuitBreaker, CircuitState
from .exceptions import (
    AppException,
    CircuitBreakerOpenError,
    NotFoundError,
    RateLimitError,
    RecommendationServiceError,
    ValidationError,
)
from .rate_limiter import SlidingWindowRateLimiter, get_identifier
from .window_store import InMemoryWindowStore, WindowStore

__all__ = [
    "AppException",
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "InMemoryWindowStore",
    "NotFoundError",
    "RateLimitError",
    "RecommendationServiceError",
    "SlidingWindowRateLimiter",
    "ValidationError",
    "WindowStore",
    "get_identifier",
]
