"""
Domain models using Pydantic.
All data structures for the recommendation and rate limiting system.
"""
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Domain Models (Internal)
# =============================================================================


class SignalKind(str, Enum):
    """Kinds of evidence that a user is interested in an item."""

    REVIEWED_HIGHLY = "reviewed_highly"
    WISHLISTED = "wishlisted"
    INTERACTED = "interacted"


class InteractionType(str, Enum):
    """Storefront interaction events tracked per item."""

    VIEW = "view"
    LIKE = "like"
    ADD_TO_CART = "add_to_cart"
    PURCHASE = "purchase"
    SHARE = "share"


# Interaction types that count towards trending
TRENDING_INTERACTION_TYPES = (
    InteractionType.VIEW,
    InteractionType.LIKE,
    InteractionType.ADD_TO_CART,
)


class Item(BaseModel):
    """
    Catalog product snapshot.
    Owned by the catalog store; the recommendation core only reads it.
    """

    id: str = Field(..., description="Opaque product identifier")
    name: str = Field(..., description="Product name")
    slug: str = Field(default="", description="URL slug")
    description: Optional[str] = Field(default=None, description="Product description")
    images: List[str] = Field(default_factory=list, description="Image URLs")
    price: float = Field(..., ge=0, description="Unit price")
    category_id: Optional[str] = Field(default=None, description="Category identifier")
    material: Optional[str] = Field(default=None, description="Primary material")
    style: Optional[str] = Field(default=None, description="Design style")
    is_featured: bool = Field(default=False, description="Merchandising feature flag")
    created_at: int = Field(default=0, description="Epoch ms, newest first is natural order")


class AffinitySignal(BaseModel):
    """Evidence that a user expressed interest in an item."""

    user_id: Optional[str] = None
    item_id: str
    kind: SignalKind
    created_at: int = Field(..., description="Epoch ms")


class Review(BaseModel):
    """Product review as stored."""

    user_id: str
    item_id: str
    rating: int = Field(..., ge=1, le=5)
    created_at: int


class WishlistEntry(BaseModel):
    """Wishlist row as stored."""

    user_id: str
    item_id: str
    created_at: int


class Interaction(BaseModel):
    """Tracked interaction event."""

    user_id: Optional[str] = None
    item_id: str
    interaction_type: InteractionType
    created_at: int
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SelectionResult(BaseModel):
    """Outcome of one run of the recommendation cascade."""

    items: List[Item] = Field(default_factory=list)
    stages: List[str] = Field(
        default_factory=list,
        description="Stages that contributed at least one item, in order",
    )
    failed_stages: List[str] = Field(default_factory=list)
    error: Optional[str] = Field(
        default=None,
        description="Set only when every attempted stage raised",
    )


class RateLimitResult(BaseModel):
    """Outcome of one sliding-window admission check."""

    allowed: bool
    remaining: int = Field(..., ge=0)
    reset_at: int = Field(..., description="Epoch ms when capacity frees up")


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class PaymentRecord(BaseModel):
    """Payment intent recorded by the payment stub."""

    id: str
    order_id: str
    amount: float
    payment_method: str
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: str
    created_at: int


# =============================================================================
# API Models (External)
# =============================================================================


class RecommendationRequest(BaseModel):
    """Body of the recommendation endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId", min_length=1)
    product_id: Optional[str] = Field(default=None, alias="productId", min_length=1)
    limit: int = Field(default=6, ge=1, le=100, description="Number of items")


class RecommendationResponse(BaseModel):
    """Recommendation endpoint response."""

    recommendations: List[Item] = Field(..., description="Ordered, deduplicated items")


class RecommendationErrorResponse(BaseModel):
    """Returned with a 500 when every stage failed."""

    error: str
    recommendations: List[Item] = Field(default_factory=list)


class InteractionRequest(BaseModel):
    """Body of the interaction tracking endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId", min_length=1)
    product_id: str = Field(..., alias="productId", min_length=1)
    interaction_type: InteractionType = Field(..., alias="interactionType")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PaymentAction(str, Enum):
    CREATE = "create"
    VERIFY = "verify"


class PaymentRequest(BaseModel):
    """Body of the payment stub endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    action: PaymentAction
    order_id: UUID = Field(..., alias="orderId")
    amount: Optional[float] = Field(default=None, gt=0)
    payment_method: Optional[str] = Field(
        default=None, alias="paymentMethod", min_length=1, max_length=50
    )
    transaction_id: Optional[str] = Field(default=None, alias="transactionId")


class PaymentResponse(BaseModel):
    success: bool
    payment: PaymentRecord
    message: str


class RateLimitErrorResponse(BaseModel):
    """Body of a 429 response."""

    error: str = "Rate limit exceeded"
    message: str
    retryAfter: int


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: Dict[str, Any] = Field(..., description="Error details")
