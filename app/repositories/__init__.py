"""Repository implementations package."""
from .memory import (
    InMemoryCatalogRepository,
    InMemoryPaymentRepository,
)

__all__ = [
    "InMemoryCatalogRepository",
    "InMemoryPaymentRepository",
]
