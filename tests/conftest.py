"""
Pytest configuration and fixtures.
"""
import time

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import (
    get_api_rate_limiter,
    get_catalog_circuit_breaker,
    get_catalog_repository,
    get_payment_rate_limiter,
    get_payment_repository,
)
from app.core.rate_limiter import SlidingWindowRateLimiter
from app.main import app
from app.models.schemas import Item
from app.repositories.memory import InMemoryCatalogRepository, InMemoryPaymentRepository


class FakeClock:
    """Manually advanced millisecond clock for rate limiter tests."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_item(
    item_id: str,
    price: float = 1000,
    category_id: str = "sofa",
    created_at: int = 0,
    **kwargs,
) -> Item:
    """Build a catalog item with sensible defaults."""
    return Item(
        id=item_id,
        name=kwargs.pop("name", item_id.title()),
        price=price,
        category_id=category_id,
        created_at=created_at,
        **kwargs,
    )


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def now_ms():
    return int(time.time() * 1000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def empty_catalog():
    """Catalog with no seed data."""
    return InMemoryCatalogRepository(seed=False)


@pytest.fixture
def mock_catalog_repo():
    """Seeded catalog for API tests."""
    return InMemoryCatalogRepository()


@pytest.fixture
def mock_payment_repo():
    return InMemoryPaymentRepository()


@pytest.fixture
def api_rate_limiter():
    return SlidingWindowRateLimiter("api", max_requests=100, window_ms=60_000)


@pytest.fixture
def payment_rate_limiter():
    return SlidingWindowRateLimiter("payment", max_requests=10, window_ms=60_000)


@pytest.fixture
def test_client(
    mock_catalog_repo,
    mock_payment_repo,
    api_rate_limiter,
    payment_rate_limiter,
):
    """
    TestClient fixture with dependency overrides.
    Uses in-memory repositories and fresh rate limiters for isolation.
    """
    app.dependency_overrides[get_catalog_repository] = lambda: mock_catalog_repo
    app.dependency_overrides[get_payment_repository] = lambda: mock_payment_repo
    app.dependency_overrides[get_api_rate_limiter] = lambda: api_rate_limiter
    app.dependency_overrides[get_payment_rate_limiter] = lambda: payment_rate_limiter
    get_catalog_circuit_breaker().reset()

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
    get_catalog_circuit_breaker().reset()
