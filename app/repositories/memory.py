"""
In-memory repository implementations.
Used for prototyping and testing.
Production would replace these with the managed Postgres backend.
"""
import time
from typing import Collection, Dict, List, Optional

from app.models.schemas import (
    AffinitySignal,
    Interaction,
    InteractionType,
    Item,
    PaymentRecord,
    Review,
    SignalKind,
    WishlistEntry,
)


def _newest_first(records: list) -> list:
    """Natural store order; sort is stable so equal timestamps keep insertion order."""
    return sorted(records, key=lambda r: r.created_at, reverse=True)


class InMemoryCatalogRepository:
    """
    In-memory implementation of CatalogRepository.
    Simulates the products, reviews, wishlist and user_interactions tables.
    """

    def __init__(self, seed: bool = True, high_rating_threshold: int = 4) -> None:
        self._items: Dict[str, Item] = {}
        self._reviews: List[Review] = []
        self._wishlist: List[WishlistEntry] = []
        self._interactions: List[Interaction] = []
        self._high_rating_threshold = high_rating_threshold
        if seed:
            self._initialize_mock_data()

    def _initialize_mock_data(self) -> None:
        """Load a small furniture catalog with some shopper history."""
        now = int(time.time() * 1000)
        day = 24 * 3600 * 1000

        catalog = [
            Item(id="sofa-oslo", name="Oslo 3-Seater Sofa", slug="oslo-3-seater-sofa",
                 price=45000, category_id="sofa", material="fabric", style="scandinavian",
                 is_featured=True, created_at=now - 30 * day),
            Item(id="sofa-milan", name="Milan Leather Sofa", slug="milan-leather-sofa",
                 price=52000, category_id="sofa", material="leather", style="modern",
                 created_at=now - 20 * day),
            Item(id="sofa-kyoto", name="Kyoto Low Sofa", slug="kyoto-low-sofa",
                 price=38000, category_id="sofa", material="fabric", style="minimalist",
                 created_at=now - 10 * day),
            Item(id="chair-aalto", name="Aalto Lounge Chair", slug="aalto-lounge-chair",
                 price=12000, category_id="chair", material="wood", style="scandinavian",
                 is_featured=True, created_at=now - 25 * day),
            Item(id="chair-eames", name="Eames Style Chair", slug="eames-style-chair",
                 price=8500, category_id="chair", material="plastic", style="modern",
                 created_at=now - 15 * day),
            Item(id="table-teak", name="Teak Dining Table", slug="teak-dining-table",
                 price=32000, category_id="table", material="wood", style="rustic",
                 is_featured=True, created_at=now - 40 * day),
            Item(id="table-marble", name="Marble Coffee Table", slug="marble-coffee-table",
                 price=18000, category_id="table", material="marble", style="modern",
                 created_at=now - 5 * day),
            Item(id="bed-nordic", name="Nordic Queen Bed", slug="nordic-queen-bed",
                 price=41000, category_id="bed", material="wood", style="scandinavian",
                 is_featured=True, created_at=now - 35 * day),
        ]
        for item in catalog:
            self.add_item(item)

        self.add_review(Review(user_id="user_cozy", item_id="sofa-oslo", rating=5,
                               created_at=now - 3 * day))
        self.add_wishlist_entry(WishlistEntry(user_id="user_cozy", item_id="chair-aalto",
                                              created_at=now - 2 * day))
        for offset, (item_id, kind) in enumerate([
            ("sofa-milan", InteractionType.VIEW),
            ("sofa-milan", InteractionType.ADD_TO_CART),
            ("table-marble", InteractionType.VIEW),
            ("table-marble", InteractionType.LIKE),
            ("table-marble", InteractionType.VIEW),
            ("bed-nordic", InteractionType.PURCHASE),
        ]):
            self._interactions.append(Interaction(
                user_id="user_browser",
                item_id=item_id,
                interaction_type=kind,
                created_at=now - (offset + 1) * 3600 * 1000,
            ))

    # -------------------------------------------------------------------------
    # Seeding helpers
    # -------------------------------------------------------------------------

    def add_item(self, item: Item) -> None:
        self._items[item.id] = item

    def add_review(self, review: Review) -> None:
        self._reviews.append(review)

    def add_wishlist_entry(self, entry: WishlistEntry) -> None:
        self._wishlist.append(entry)

    # -------------------------------------------------------------------------
    # CatalogRepository
    # -------------------------------------------------------------------------

    async def get_affinity_signals(
        self,
        user_id: str,
        kind: SignalKind,
        limit: int,
    ) -> List[AffinitySignal]:
        """Fetch a user's most recent signals of one kind."""
        if kind == SignalKind.REVIEWED_HIGHLY:
            rows = [
                r for r in self._reviews
                if r.user_id == user_id and r.rating >= self._high_rating_threshold
            ]
        elif kind == SignalKind.WISHLISTED:
            rows = [w for w in self._wishlist if w.user_id == user_id]
        else:
            rows = [i for i in self._interactions if i.user_id == user_id]

        return [
            AffinitySignal(
                user_id=user_id,
                item_id=row.item_id,
                kind=kind,
                created_at=row.created_at,
            )
            for row in _newest_first(rows)[:limit]
        ]

    async def get_item(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

    async def get_items_by_ids(self, item_ids: Collection[str]) -> List[Item]:
        wanted = set(item_ids)
        return _newest_first([i for i in self._items.values() if i.id in wanted])

    async def get_items_in_categories(
        self,
        category_ids: Collection[str],
        exclude_ids: Collection[str],
        limit: int,
    ) -> List[Item]:
        categories = set(category_ids)
        excluded = set(exclude_ids)
        matches = [
            i for i in self._items.values()
            if i.category_id in categories and i.id not in excluded
        ]
        return _newest_first(matches)[:limit]

    async def get_items_in_price_range(
        self,
        category_id: Optional[str],
        min_price: Optional[float],
        max_price: Optional[float],
        exclude_ids: Collection[str],
        limit: int,
    ) -> List[Item]:
        excluded = set(exclude_ids)
        matches = []
        for item in self._items.values():
            if item.id in excluded:
                continue
            if category_id is not None and item.category_id != category_id:
                continue
            if min_price is not None and item.price < min_price:
                continue
            if max_price is not None and item.price > max_price:
                continue
            matches.append(item)
        return _newest_first(matches)[:limit]

    async def count_interactions_since(
        self,
        since_ms: int,
        interaction_types: Collection[InteractionType],
    ) -> Dict[str, int]:
        kinds = set(interaction_types)
        counts: Dict[str, int] = {}
        for interaction in self._interactions:
            if interaction.created_at < since_ms or interaction.interaction_type not in kinds:
                continue
            counts[interaction.item_id] = counts.get(interaction.item_id, 0) + 1
        return counts

    async def get_featured_items(
        self,
        exclude_ids: Collection[str],
        limit: int,
    ) -> List[Item]:
        excluded = set(exclude_ids)
        featured = [
            i for i in self._items.values()
            if i.is_featured and i.id not in excluded
        ]
        return _newest_first(featured)[:limit]

    async def record_interaction(self, interaction: Interaction) -> Interaction:
        self._interactions.append(interaction)
        return interaction


class InMemoryPaymentRepository:
    """
    In-memory implementation of PaymentRepository.
    Simulates the payments table.
    """

    def __init__(self) -> None:
        self._payments: Dict[str, PaymentRecord] = {}

    async def save(self, payment: PaymentRecord) -> PaymentRecord:
        self._payments[payment.id] = payment
        return payment

    async def find_by_transaction(
        self,
        transaction_id: str,
        order_id: str,
    ) -> Optional[PaymentRecord]:
        for payment in self._payments.values():
            if payment.transaction_id == transaction_id and payment.order_id == order_id:
                return payment
        return None
