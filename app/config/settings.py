"""
Centralized configuration using Pydantic BaseSettings.
All environment variables are loaded here - no hardcoded values.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Furniture Recommendations API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Feature Flags
    PERSONALIZATION_ENABLED: bool = True
    KILL_SWITCH_ACTIVE: bool = False

    # Rollout Configuration
    ROLLOUT_PERCENTAGE: int = 100  # Percentage of users eligible for collaborative stage

    # Recommendations
    DEFAULT_RECOMMENDATION_LIMIT: int = 6
    DEFAULT_TRENDING_LIMIT: int = 10
    MAX_RECOMMENDATION_LIMIT: int = 100
    REVIEW_SIGNAL_LIMIT: int = 5
    WISHLIST_SIGNAL_LIMIT: int = 5
    INTERACTION_SIGNAL_LIMIT: int = 10
    HIGH_RATING_THRESHOLD: int = 4
    PRICE_BAND_RATIO: float = 0.3  # +/- 30% around the reference price
    TRENDING_WINDOW_DAYS: int = 7

    # Telemetry
    ENABLE_OTEL: bool = False  # Default to False to prevent gRPC errors in dev
    ENABLE_PROMETHEUS: bool = True

    # Circuit Breaker (catalog store reads)
    CIRCUIT_BREAKER_FAILURE_THRESHOLD: int = 5
    CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC: int = 30

    # Rate Limiting (sliding window)
    API_RATE_LIMIT_MAX_REQUESTS: int = 100
    API_RATE_LIMIT_WINDOW_MS: int = 60 * 1000
    PAYMENT_RATE_LIMIT_MAX_REQUESTS: int = 10
    PAYMENT_RATE_LIMIT_WINDOW_MS: int = 60 * 1000
    RATE_LIMIT_IDLE_TTL_SEC: Optional[int] = None  # None keeps identities forever

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance - singleton pattern."""
    return Settings()
