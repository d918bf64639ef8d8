"""
Repository interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
These define the contracts that data access implementations must follow.
"""
from abc import ABC, abstractmethod
from typing import Collection, Dict, List, Optional, Protocol, runtime_checkable

from app.models.schemas import (
    AffinitySignal,
    Interaction,
    InteractionType,
    Item,
    PaymentRecord,
    SignalKind,
)


@runtime_checkable
class CatalogRepository(Protocol):
    """
    Read surface of the catalog / interaction store used by recommendations.
    Production: managed Postgres behind the storefront backend.
    Testing: In-memory implementation.

    Every list-returning query uses the store's natural order: newest first.
    """

    async def get_affinity_signals(
        self,
        user_id: str,
        kind: SignalKind,
        limit: int,
    ) -> List[AffinitySignal]:
        """
        Fetch a user's most recent signals of one kind.

        REVIEWED_HIGHLY only yields reviews at or above the high rating
        threshold.
        """
        ...

    async def get_item(self, item_id: str) -> Optional[Item]:
        """Fetch a single item, None if unknown."""
        ...

    async def get_items_by_ids(self, item_ids: Collection[str]) -> List[Item]:
        """Fetch the items whose id is in item_ids (unknown ids are skipped)."""
        ...

    async def get_items_in_categories(
        self,
        category_ids: Collection[str],
        exclude_ids: Collection[str],
        limit: int,
    ) -> List[Item]:
        """Fetch items in any of category_ids, skipping exclude_ids."""
        ...

    async def get_items_in_price_range(
        self,
        category_id: Optional[str],
        min_price: Optional[float],
        max_price: Optional[float],
        exclude_ids: Collection[str],
        limit: int,
    ) -> List[Item]:
        """
        Fetch items matching every given predicate.

        A None category or price bound leaves that predicate out.
        """
        ...

    async def count_interactions_since(
        self,
        since_ms: int,
        interaction_types: Collection[InteractionType],
    ) -> Dict[str, int]:
        """Count interactions per item id created at or after since_ms."""
        ...

    async def get_featured_items(
        self,
        exclude_ids: Collection[str],
        limit: int,
    ) -> List[Item]:
        """Fetch items flagged featured, skipping exclude_ids."""
        ...

    async def record_interaction(self, interaction: Interaction) -> Interaction:
        """Persist a tracked interaction."""
        ...


@runtime_checkable
class PaymentRepository(Protocol):
    """Storage for payment intents created by the payment stub."""

    async def save(self, payment: PaymentRecord) -> PaymentRecord:
        ...

    async def find_by_transaction(
        self,
        transaction_id: str,
        order_id: str,
    ) -> Optional[PaymentRecord]:
        ...


class FeatureFlagService(ABC):
    """
    Abstract base class for feature flag evaluation.
    Supports kill switch and gradual rollout of personalized recommendations.
    """

    @abstractmethod
    def is_personalization_enabled(self, user_id: str) -> bool:
        """
        Check if the collaborative (user-based) stage may run for this user.

        Args:
            user_id: User identifier for percentage rollout

        Returns:
            True if personalization should be applied
        """
        pass

    @abstractmethod
    def is_kill_switch_active(self) -> bool:
        """
        Check if global kill switch is activated.

        Returns:
            True if all personalization should be disabled
        """
        pass
