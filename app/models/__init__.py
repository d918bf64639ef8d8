"""Models package - domain entities and interfaces."""
from .interfaces import (
    CatalogRepository,
    FeatureFlagService,
    PaymentRepository,
)
from .schemas import (
    AffinitySignal,
    ErrorResponse,
    Interaction,
    InteractionRequest,
    InteractionType,
    Item,
    PaymentAction,
    PaymentRecord,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    RateLimitErrorResponse,
    RateLimitResult,
    RecommendationErrorResponse,
    RecommendationRequest,
    RecommendationResponse,
    Review,
    SelectionResult,
    SignalKind,
    WishlistEntry,
)

__all__ = [
    # Interfaces
    "CatalogRepository",
    "FeatureFlagService",
    "PaymentRepository",
    # Schemas
    "AffinitySignal",
    "ErrorResponse",
    "Interaction",
    "InteractionRequest",
    "InteractionType",
    "Item",
    "PaymentAction",
    "PaymentRecord",
    "PaymentRequest",
    "PaymentResponse",
    "PaymentStatus",
    "RateLimitErrorResponse",
    "RateLimitResult",
    "RecommendationErrorResponse",
    "RecommendationRequest",
    "RecommendationResponse",
    "Review",
    "SelectionResult",
    "SignalKind",
    "WishlistEntry",
]
