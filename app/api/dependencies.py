"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
from functools import lru_cache

from fastapi import Depends

from app.config import get_settings
from app.core.circuit_breaker import CircuitBreaker
from app.core.exceptions import RateLimitError
from app.core.rate_limiter import SlidingWindowRateLimiter
from app.core.window_store import InMemoryWindowStore
from app.models.schemas import RateLimitResult
from app.repositories.memory import InMemoryCatalogRepository, InMemoryPaymentRepository
from app.services.feature_flags import ConfigBasedFeatureFlagService
from app.services.payments import PaymentService
from app.services.recommendation import RecommendationSelector


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_catalog_repository() -> InMemoryCatalogRepository:
    """Get singleton catalog repository."""
    return InMemoryCatalogRepository(
        high_rating_threshold=get_settings().HIGH_RATING_THRESHOLD,
    )


@lru_cache()
def get_payment_repository() -> InMemoryPaymentRepository:
    """Get singleton payment repository."""
    return InMemoryPaymentRepository()


@lru_cache()
def get_feature_flag_service() -> ConfigBasedFeatureFlagService:
    """Get singleton feature flag service."""
    return ConfigBasedFeatureFlagService()


@lru_cache()
def get_catalog_circuit_breaker() -> CircuitBreaker:
    """Get singleton circuit breaker for catalog store reads."""
    settings = get_settings()
    return CircuitBreaker(
        name="catalog_store",
        failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
        recovery_timeout_sec=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC,
    )


@lru_cache()
def get_api_rate_limiter() -> SlidingWindowRateLimiter:
    """Limiter for recommendation and interaction endpoints."""
    settings = get_settings()
    return SlidingWindowRateLimiter(
        name="api",
        max_requests=settings.API_RATE_LIMIT_MAX_REQUESTS,
        window_ms=settings.API_RATE_LIMIT_WINDOW_MS,
        store=InMemoryWindowStore(idle_ttl_seconds=settings.RATE_LIMIT_IDLE_TTL_SEC),
    )


@lru_cache()
def get_payment_rate_limiter() -> SlidingWindowRateLimiter:
    """Stricter limiter for the payment endpoint."""
    settings = get_settings()
    return SlidingWindowRateLimiter(
        name="payment",
        max_requests=settings.PAYMENT_RATE_LIMIT_MAX_REQUESTS,
        window_ms=settings.PAYMENT_RATE_LIMIT_WINDOW_MS,
        store=InMemoryWindowStore(idle_ttl_seconds=settings.RATE_LIMIT_IDLE_TTL_SEC),
    )


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


def get_recommendation_selector(
    catalog_repo: InMemoryCatalogRepository = Depends(get_catalog_repository),
) -> RecommendationSelector:
    """
    Get recommendation selector with all dependencies wired.
    The catalog repository is injected so tests can override it.
    """
    return RecommendationSelector(
        catalog_repo=catalog_repo,
        feature_flag_service=get_feature_flag_service(),
        circuit_breaker=get_catalog_circuit_breaker(),
    )


def get_payment_service(
    payment_repo: InMemoryPaymentRepository = Depends(get_payment_repository),
) -> PaymentService:
    return PaymentService(payment_repo)


def enforce_rate_limit(limiter: SlidingWindowRateLimiter, identity: str) -> RateLimitResult:
    """Admit the request or raise RateLimitError (rendered as HTTP 429)."""
    result = limiter.is_allowed(identity)
    if not result.allowed:
        raise RateLimitError(reset_at_ms=result.reset_at, now_ms=limiter.now())
    return result


# =============================================================================
# Cleanup Functions
# =============================================================================


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_catalog_repository.cache_clear()
    get_payment_repository.cache_clear()
    get_feature_flag_service.cache_clear()
    get_catalog_circuit_breaker.cache_clear()
    get_api_rate_limiter.cache_clear()
    get_payment_rate_limiter.cache_clear()
