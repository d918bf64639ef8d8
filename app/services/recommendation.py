"""
Recommendation selector.
Cascades through stages of decreasing personalization until the quota is
filled: collaborative -> content-based -> trending -> featured.
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Set, TypeVar

from app.config import get_settings
from app.core.circuit_breaker import CircuitBreaker
from app.core.metrics import RECOMMENDATION_STAGE_FAILURES, RECOMMENDATION_STAGE_ITEMS
from app.models.interfaces import CatalogRepository, FeatureFlagService
from app.models.schemas import (
    TRENDING_INTERACTION_TYPES,
    Item,
    SelectionResult,
    SignalKind,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DAY_MS = 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class SelectionContext:
    """
    Mutable state of one cascade run.

    `exclusions` holds every id that may not be added: the reference item,
    the user's affinity items and everything already selected.
    """

    def __init__(self, user_id: Optional[str], item_id: Optional[str], limit: int) -> None:
        self.user_id = user_id
        self.item_id = item_id
        self.limit = limit
        self.items: List[Item] = []
        self.exclusions: Set[str] = set()
        if item_id:
            self.exclusions.add(item_id)

    @property
    def remaining(self) -> int:
        return max(0, self.limit - len(self.items))

    def extend(self, candidates: Iterable[Item]) -> List[Item]:
        """Append candidates in order, skipping excluded ids, up to the limit."""
        accepted = []
        for item in candidates:
            if self.remaining == 0:
                break
            if item.id in self.exclusions:
                continue
            self.items.append(item)
            self.exclusions.add(item.id)
            accepted.append(item)
        return accepted


# =============================================================================
# Stages (Strategy Pattern)
# =============================================================================


class RecommendationStage(ABC):
    """One heuristic in the cascade."""

    name: str = "stage"

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self._catalog = catalog_repo
        self._circuit_breaker = circuit_breaker

    def applies(self, context: SelectionContext) -> bool:
        """Whether the stage has the inputs it needs."""
        return True

    @abstractmethod
    async def attempt(self, context: SelectionContext, remaining: int) -> List[Item]:
        """
        Produce up to `remaining` candidates not in context.exclusions.

        Store failures propagate; the selector degrades the stage to empty.
        """
        pass

    async def _read(self, query: Callable[[], Awaitable[T]]) -> T:
        if self._circuit_breaker is None:
            return await query()
        return await self._circuit_breaker.call(query)


class CollaborativeStage(RecommendationStage):
    """Items sharing a category with what the user reviewed well, wishlisted or touched."""

    name = "collaborative"

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        circuit_breaker: Optional[CircuitBreaker] = None,
        feature_flags: Optional[FeatureFlagService] = None,
        review_limit: int = 5,
        wishlist_limit: int = 5,
        interaction_limit: int = 10,
    ) -> None:
        super().__init__(catalog_repo, circuit_breaker)
        self._feature_flags = feature_flags
        self._signal_limits = (
            (SignalKind.REVIEWED_HIGHLY, review_limit),
            (SignalKind.WISHLISTED, wishlist_limit),
            (SignalKind.INTERACTED, interaction_limit),
        )

    def applies(self, context: SelectionContext) -> bool:
        if not context.user_id:
            return False
        if self._feature_flags is None:
            return True
        return self._feature_flags.is_personalization_enabled(context.user_id)

    async def attempt(self, context: SelectionContext, remaining: int) -> List[Item]:
        user_id = context.user_id
        affinity_ids: List[str] = []
        for kind, limit in self._signal_limits:
            signals = await self._read(
                lambda kind=kind, limit=limit: self._catalog.get_affinity_signals(
                    user_id, kind, limit
                )
            )
            signal_ids = [s.item_id for s in signals]
            affinity_ids.extend(signal_ids)
            # Excluded per read so a later failed read cannot leak them back
            context.exclusions.update(signal_ids)

        if not affinity_ids:
            return []

        liked = await self._read(lambda: self._catalog.get_items_by_ids(affinity_ids))
        category_ids = list(dict.fromkeys(i.category_id for i in liked if i.category_id))
        if not category_ids:
            return []
        materials = {i.material for i in liked if i.material}
        styles = {i.style for i in liked if i.style}

        candidates = await self._read(
            lambda: self._catalog.get_items_in_categories(
                category_ids, context.exclusions, remaining
            )
        )

        # More shared material/style first; stable sort keeps newest-first for ties
        return sorted(
            candidates,
            key=lambda i: -((i.material in materials) + (i.style in styles)),
        )


class ContentBasedStage(RecommendationStage):
    """Items in the reference item's category and price band."""

    name = "content_based"

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        circuit_breaker: Optional[CircuitBreaker] = None,
        price_band_ratio: float = 0.3,
    ) -> None:
        super().__init__(catalog_repo, circuit_breaker)
        self._price_band_ratio = price_band_ratio

    def applies(self, context: SelectionContext) -> bool:
        return bool(context.item_id)

    async def attempt(self, context: SelectionContext, remaining: int) -> List[Item]:
        reference = await self._read(lambda: self._catalog.get_item(context.item_id))
        if reference is None:
            logger.info(f"Reference item not found: {context.item_id}")
            return []

        # Category and price band are ANDed; a missing attribute drops its predicate
        min_price = max_price = None
        if reference.price:
            min_price = reference.price * (1 - self._price_band_ratio)
            max_price = reference.price * (1 + self._price_band_ratio)

        return await self._read(
            lambda: self._catalog.get_items_in_price_range(
                category_id=reference.category_id,
                min_price=min_price,
                max_price=max_price,
                exclude_ids=context.exclusions,
                limit=remaining,
            )
        )


class TrendingStage(RecommendationStage):
    """Most interacted-with items over a trailing window."""

    name = "trending"

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        circuit_breaker: Optional[CircuitBreaker] = None,
        window_days: int = 7,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        super().__init__(catalog_repo, circuit_breaker)
        self._window_ms = window_days * DAY_MS
        self._clock = clock

    async def attempt(self, context: SelectionContext, remaining: int) -> List[Item]:
        since = self._clock() - self._window_ms
        counts = await self._read(
            lambda: self._catalog.count_interactions_since(since, TRENDING_INTERACTION_TYPES)
        )

        # Count descending, ties by id so repeated calls agree
        ranked = sorted(
            (item_id for item_id in counts if item_id not in context.exclusions),
            key=lambda item_id: (-counts[item_id], item_id),
        )
        top_ids = ranked[:remaining]
        if not top_ids:
            return []

        items = await self._read(lambda: self._catalog.get_items_by_ids(top_ids))
        by_id = {item.id: item for item in items}
        return [by_id[item_id] for item_id in top_ids if item_id in by_id]


class FeaturedStage(RecommendationStage):
    """Merchandised items; final fallback."""

    name = "featured"

    async def attempt(self, context: SelectionContext, remaining: int) -> List[Item]:
        return await self._read(
            lambda: self._catalog.get_featured_items(context.exclusions, remaining)
        )


# =============================================================================
# Selector
# =============================================================================


class RecommendationSelector:
    """
    Runs the stage cascade and assembles the result.

    Read-only and uncached: every call re-queries the catalog store.
    """

    def __init__(
        self,
        catalog_repo: CatalogRepository,
        feature_flag_service: Optional[FeatureFlagService] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        stages: Optional[List[RecommendationStage]] = None,
    ) -> None:
        settings = get_settings()
        self._max_limit = settings.MAX_RECOMMENDATION_LIMIT
        self._stages = stages if stages is not None else [
            CollaborativeStage(
                catalog_repo,
                circuit_breaker,
                feature_flags=feature_flag_service,
                review_limit=settings.REVIEW_SIGNAL_LIMIT,
                wishlist_limit=settings.WISHLIST_SIGNAL_LIMIT,
                interaction_limit=settings.INTERACTION_SIGNAL_LIMIT,
            ),
            ContentBasedStage(
                catalog_repo,
                circuit_breaker,
                price_band_ratio=settings.PRICE_BAND_RATIO,
            ),
            TrendingStage(
                catalog_repo,
                circuit_breaker,
                window_days=settings.TRENDING_WINDOW_DAYS,
            ),
            FeaturedStage(catalog_repo, circuit_breaker),
        ]

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self._stages]

    def clamp_limit(self, limit: int) -> int:
        return max(1, min(int(limit), self._max_limit))

    async def select(
        self,
        user_id: Optional[str] = None,
        item_id: Optional[str] = None,
        limit: int = 6,
        only: Optional[Sequence[str]] = None,
    ) -> SelectionResult:
        """
        Select up to `limit` recommendations.

        Args:
            user_id: Shopper to personalize for
            item_id: Reference item being viewed (never returned)
            limit: Requested size, clamped to [1, MAX_RECOMMENDATION_LIMIT]
            only: Restrict the cascade to these stage names

        Returns:
            SelectionResult; `error` is set only when every attempted stage raised
        """
        start_time = time.time()
        context = SelectionContext(user_id, item_id, self.clamp_limit(limit))
        attempted: List[str] = []
        contributed: List[str] = []
        failures: List[str] = []
        errors: List[str] = []

        for stage in self._stages:
            if context.remaining == 0:
                break
            if only is not None and stage.name not in only:
                continue
            if not stage.applies(context):
                continue

            attempted.append(stage.name)
            try:
                produced = await stage.attempt(context, context.remaining)
            except Exception as e:
                failures.append(stage.name)
                errors.append(f"{stage.name}: {e}")
                RECOMMENDATION_STAGE_FAILURES.labels(stage=stage.name).inc()
                logger.warning(
                    f"Recommendation stage failed, continuing: stage={stage.name}, error={e}",
                    extra={"stage": stage.name, "user_id": user_id},
                )
                continue

            accepted = context.extend(produced)
            if accepted:
                contributed.append(stage.name)
                RECOMMENDATION_STAGE_ITEMS.labels(stage=stage.name).inc(len(accepted))

        if attempted and len(failures) == len(attempted):
            logger.error(
                f"All recommendation stages failed: {', '.join(failures)}",
                extra={"user_id": user_id},
            )
            return SelectionResult(
                items=[],
                failed_stages=failures,
                error="All recommendation strategies failed: " + "; ".join(errors),
            )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Recommendations served: items={len(context.items)}, "
            f"stages={contributed}, elapsed_ms={elapsed_ms:.2f}",
            extra={"user_id": user_id},
        )
        return SelectionResult(
            items=context.items,
            stages=contributed,
            failed_stages=failures,
        )
