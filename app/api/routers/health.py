"""
Health check router for observability.
"""
from fastapi import APIRouter

from app.api.dependencies import (
    get_api_rate_limiter,
    get_catalog_circuit_breaker,
    get_payment_rate_limiter,
)
from app.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health Check")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness Check")
async def readiness_check() -> dict:
    """
    Readiness check for Kubernetes.
    Returns catalog circuit state, feature flags and rate limiter footprint.
    """
    circuit_breaker = get_catalog_circuit_breaker()
    settings = get_settings()

    return {
        "status": "ready",
        "circuit_breaker": {
            "name": circuit_breaker.name,
            "state": circuit_breaker.state.value,
        },
        "feature_flags": {
            "personalization_enabled": settings.PERSONALIZATION_ENABLED,
            "kill_switch_active": settings.KILL_SWITCH_ACTIVE,
        },
        # Identity maps grow for the life of the process unless an idle TTL is set
        "rate_limiters": {
            limiter.name: {"tracked_identities": limiter.tracked_identities()}
            for limiter in (get_api_rate_limiter(), get_payment_rate_limiter())
        },
    }
