"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T, K]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on the document-store driver.

Lookups return ``None`` for missing entities instead of raising; the
Service Layer decides how to report a missing entity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, TypeVar

T = TypeVar("T")
K = TypeVar("K")


class IRepository(ABC, Generic[T, K]):
    """Base generic repository contract.

    ``T`` is the domain entity managed by the repository (e.g.
    ``Product``) and ``K`` the type of its business key.
    """

    @abstractmethod
    def find_by_id(self, id: K) -> Optional[T]:
        """Retrieve an entity by its key."""

    @abstractmethod
    def insert(self, entity: T) -> T:
        """Persist a new entity and return it as stored."""

    @abstractmethod
    def update_by_id(self, id: K, changes: Mapping[str, Any]) -> Optional[T]:
        """Atomically apply ``changes`` and return the updated entity."""

    @abstractmethod
    def delete_by_id(self, id: K) -> Optional[T]:
        """Atomically remove an entity and return what was removed."""
