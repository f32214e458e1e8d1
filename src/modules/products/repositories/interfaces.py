"""Product repository interface.

Extends ``IRepository[Product, str]`` with the paged listing required by
the catalogue screen and the bulk operations used by the seed command.
All operations are keyed by ``productId``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.filters import ProductQuery
    from modules.products.models import Product


class IProductRepository(IRepository["Product", str]):
    """Repository contract for the Product collection.

    ``insert`` must raise ``ProductAlreadyExists`` when the store rejects
    a duplicate ``productId``; any other storage failure surfaces as
    ``ProductPersistenceError``.
    """

    @abstractmethod
    def find_many(self, query: ProductQuery) -> tuple[list[Product], int]:
        """Return one page of matching products and the unpaged total.

        The page and the count are independent reads; under concurrent
        writes they are not guaranteed to agree.
        """

    @abstractmethod
    def ensure_indexes(self) -> None:
        """Create the unique, compound and text indexes if missing."""

    @abstractmethod
    def delete_all(self) -> int:
        """Remove every product. Returns the number removed."""

    @abstractmethod
    def insert_many(self, products: Iterable[Product]) -> int:
        """Bulk-insert products. Returns the number inserted."""
