"""API package - FastAPI routes and dependencies."""
from .dependencies import get_recommendation_selector
from .routers import (
    health_router,
    interactions_router,
    payments_router,
    recommendations_router,
)

__all__ = [
    "get_recommendation_selector",
    "health_router",
    "interactions_router",
    "payments_router",
    "recommendations_router",
]
