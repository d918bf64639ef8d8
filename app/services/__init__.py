"""Services package - business logic layer."""
from .feature_flags import ConfigBasedFeatureFlagService
from .payments import PaymentService
from .recommendation import (
    CollaborativeStage,
    ContentBasedStage,
    FeaturedStage,
    RecommendationSelector,
    RecommendationStage,
    SelectionContext,
    TrendingStage,
)

__all__ = [
    "CollaborativeStage",
    "ConfigBasedFeatureFlagService",
    "ContentBasedStage",
    "FeaturedStage",
    "PaymentService",
    "RecommendationSelector",
    "RecommendationStage",
    "SelectionContext",
    "TrendingStage",
]
