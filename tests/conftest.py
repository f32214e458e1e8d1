from __future__ import annotations

import itertools
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Optional

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.products.constants import EDITABLE_FIELDS
from modules.products.exceptions import ProductAlreadyExists
from modules.products.filters import ProductQuery
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class InMemoryProductRepository(IProductRepository):
    """Dict-backed repository with the store's contract.

    ``insert`` rejects a duplicate ``productId`` under a lock, like the
    unique index does, so concurrent creates can be exercised.
    """

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self._clock = itertools.count()

    def _tick(self) -> datetime:
        return _EPOCH + timedelta(seconds=next(self._clock))

    def find_by_id(self, id: str) -> Optional[Product]:
        document = self._documents.get(id)
        return Product.from_document(document) if document else None

    def find_many(self, query: ProductQuery) -> tuple[list[Product], int]:
        matches = [
            doc for doc in self._documents.values() if self._matches(doc, query)
        ]
        matches.sort(key=lambda doc: doc["createdAt"], reverse=True)
        page = matches[query.skip : query.skip + query.limit]
        return [Product.from_document(doc) for doc in page], len(matches)

    @staticmethod
    def _matches(doc: Mapping[str, Any], query: ProductQuery) -> bool:
        if query.category and doc["category"] != query.category:
            return False
        if query.in_stock and doc["stock"] <= 0:
            return False
        if query.search:
            term = query.search.lower()
            return term in doc["name"].lower() or term in doc["category"].lower()
        return True

    def insert(self, entity: Product) -> Product:
        with self._lock:
            if entity.product_id in self._documents:
                raise ProductAlreadyExists(entity.product_id)
            now = self._tick()
            stored = entity.model_copy(
                update={
                    "object_id": f"oid-{entity.product_id}",
                    "created_at": now,
                    "updated_at": now,
                }
            )
            self._documents[entity.product_id] = {
                "_id": stored.object_id,
                **stored.to_document(),
            }
        return stored

    def update_by_id(self, id: str, changes: Mapping[str, Any]) -> Optional[Product]:
        with self._lock:
            document = self._documents.get(id)
            if document is None:
                return None
            for key, value in changes.items():
                if key not in EDITABLE_FIELDS or key == "productId":
                    continue
                if value is None:
                    document.pop(key, None)
                else:
                    document[key] = value
            document["updatedAt"] = self._tick()
            return Product.from_document(document)

    def delete_by_id(self, id: str) -> Optional[Product]:
        with self._lock:
            document = self._documents.pop(id, None)
        return Product.from_document(document) if document else None

    def ensure_indexes(self) -> None:
        pass

    def delete_all(self) -> int:
        with self._lock:
            removed = len(self._documents)
            self._documents.clear()
        return removed

    def insert_many(self, products: Iterable[Product]) -> int:
        inserted = 0
        for product in products:
            self.insert(product)
            inserted += 1
        return inserted


@pytest.fixture()
def product_repository() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture(autouse=True)
def _use_memory_repository(monkeypatch, product_repository):
    """Route every view and command to the in-memory repository."""
    monkeypatch.setattr(
        "modules.products.views.get_product_repository", lambda: product_repository
    )
    monkeypatch.setattr(
        "modules.products.management.commands.seed_products.get_product_repository",
        lambda: product_repository,
    )


@pytest.fixture(autouse=True)
def _database_up(monkeypatch):
    """Report the store as reachable without opening a connection."""
    monkeypatch.setattr(
        "modules.core.views.connection_status",
        lambda: {
            "status": "up",
            "host": "localhost:27017",
            "name": "smart_grocery_test",
            "response_time_ms": 0.5,
        },
    )


@pytest.fixture(autouse=True)
def _reset_throttling():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


def make_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "productId": "P001",
        "name": "Amul Milk (1L)",
        "mrpPrice": 65.0,
        "stock": 50,
        "category": "Dairy",
        "discounts": "10% off",
        "expiryDate": "2099-08-15",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def payload_factory():
    return make_payload
