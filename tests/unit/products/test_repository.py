"""Unit tests for ProductMongoRepository against a mocked collection.

Covers:
- Driver errors translated into domain exceptions.
- Text search with fallback to substring matching.
- Update document shape ($set / $unset, immutable productId).
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import pytest
from bson.errors import InvalidDocument
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, OperationFailure, ServerSelectionTimeoutError

from modules.products.exceptions import ProductAlreadyExists, ProductPersistenceError
from modules.products.filters import ProductQuery
from modules.products.models import Product
from modules.products.repositories.mongo_repository import ProductMongoRepository

pytestmark = pytest.mark.unit


DOCUMENT = {
    "_id": "665f1c2e9b1e8a3d4c5b6a79",
    "productId": "P001",
    "name": "Amul Milk (1L)",
    "mrpPrice": 65.0,
    "stock": 50,
    "category": "Dairy",
    "discounts": "10% off",
    "image": "https://via.placeholder.com/100",
}


@pytest.fixture()
def collection():
    mock = MagicMock()
    mock.name = "products"
    return mock


@pytest.fixture()
def repo(collection):
    return ProductMongoRepository(collection)


def _product() -> Product:
    return Product.from_document({k: v for k, v in DOCUMENT.items() if k != "_id"})


# ===========================================================================
# Reads
# ===========================================================================


class TestFindById:
    def test_found(self, repo, collection):
        collection.find_one.return_value = dict(DOCUMENT)

        product = repo.find_by_id("P001")

        collection.find_one.assert_called_once_with({"productId": "P001"})
        assert product.object_id == DOCUMENT["_id"]
        assert product.name == "Amul Milk (1L)"

    def test_missing_returns_none(self, repo, collection):
        collection.find_one.return_value = None
        assert repo.find_by_id("P999") is None

    def test_driver_error_translated(self, repo, collection):
        collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(ProductPersistenceError):
            repo.find_by_id("P001")


class TestFindMany:
    def test_page_and_total(self, repo, collection):
        collection.find.return_value.sort.return_value.skip.return_value.limit.return_value = [
            dict(DOCUMENT)
        ]
        collection.count_documents.return_value = 7

        products, total = repo.find_many(ProductQuery(category="Dairy", page=2, limit=3))

        assert total == 7
        assert [p.product_id for p in products] == ["P001"]
        collection.find.assert_called_once_with({"category": "Dairy"}, None)
        cursor = collection.find.return_value.sort.return_value
        cursor.skip.assert_called_once_with(3)
        cursor.skip.return_value.limit.assert_called_once_with(3)
        collection.count_documents.assert_called_once_with({"category": "Dairy"})

    def test_text_search_ranks_by_score(self, repo, collection):
        collection.find.return_value.sort.return_value.skip.return_value.limit.return_value = []
        collection.count_documents.return_value = 0

        repo.find_many(ProductQuery(search="milk"))

        mongo_filter, projection = collection.find.call_args.args
        assert mongo_filter == {"$text": {"$search": "milk"}}
        assert projection == {"score": {"$meta": "textScore"}}
        sort = collection.find.return_value.sort.call_args.args[0]
        assert sort[0] == ("score", {"$meta": "textScore"})

    def test_falls_back_without_text_index(self, repo, collection):
        collection.find.return_value.sort.return_value.skip.return_value.limit.return_value = []
        collection.count_documents.side_effect = [
            OperationFailure("text index required for $text query", code=27),
            2,
        ]

        _, total = repo.find_many(ProductQuery(search="milk"))

        assert total == 2
        fallback_filter = collection.count_documents.call_args.args[0]
        assert "$or" in fallback_filter
        assert "$text" not in fallback_filter

    def test_other_operation_failures_propagate(self, repo, collection):
        collection.count_documents.side_effect = OperationFailure("bad query", code=2)
        with pytest.raises(ProductPersistenceError):
            repo.find_many(ProductQuery(search="milk"))

    def test_unencodable_skip_translated(self, repo, collection):
        collection.find.return_value.sort.return_value.skip.side_effect = OverflowError(
            "MongoDB can only handle up to 8-byte ints"
        )
        collection.count_documents.return_value = 0
        with pytest.raises(ProductPersistenceError):
            repo.find_many(ProductQuery(page=10**20, limit=50))


# ===========================================================================
# Writes
# ===========================================================================


class TestInsert:
    def test_stamps_timestamps_and_returns_id(self, repo, collection):
        collection.insert_one.return_value.inserted_id = "abc123"

        stored = repo.insert(_product())

        document = collection.insert_one.call_args.args[0]
        assert "_id" not in document
        assert document["createdAt"] == document["updatedAt"]
        assert stored.object_id == "abc123"
        assert stored.created_at is not None

    def test_duplicate_key_is_already_exists(self, repo, collection):
        collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        with pytest.raises(ProductAlreadyExists):
            repo.insert(_product())

    @pytest.mark.parametrize(
        "error",
        [
            OverflowError("MongoDB can only handle up to 8-byte ints"),
            InvalidDocument("cannot encode object"),
        ],
    )
    def test_encoding_failure_translated(self, repo, collection, error):
        collection.insert_one.side_effect = error
        with pytest.raises(ProductPersistenceError):
            repo.insert(_product())


class TestUpdateById:
    def test_sets_and_unsets(self, repo, collection):
        collection.find_one_and_update.return_value = dict(DOCUMENT, stock=10)

        product = repo.update_by_id(
            "P001", {"stock": 10, "expiryDate": None, "productId": "P002", "score": 1}
        )

        assert product.stock == 10
        query, update = collection.find_one_and_update.call_args.args
        assert query == {"productId": "P001"}
        assert update["$set"]["stock"] == 10
        assert "updatedAt" in update["$set"]
        assert "productId" not in update["$set"]
        assert "score" not in update["$set"]
        assert update["$unset"] == {"expiryDate": ""}
        assert (
            collection.find_one_and_update.call_args.kwargs["return_document"]
            is ReturnDocument.AFTER
        )

    def test_missing_returns_none(self, repo, collection):
        collection.find_one_and_update.return_value = None
        assert repo.update_by_id("P999", {"stock": 1}) is None


class TestDelete:
    def test_returns_removed_document(self, repo, collection):
        collection.find_one_and_delete.return_value = dict(DOCUMENT)
        assert repo.delete_by_id("P001").product_id == "P001"

    def test_missing_returns_none(self, repo, collection):
        collection.find_one_and_delete.return_value = None
        assert repo.delete_by_id("P999") is None

    def test_delete_all(self, repo, collection):
        collection.delete_many.return_value.deleted_count = 8
        assert repo.delete_all() == 8
        collection.delete_many.assert_called_once_with({})


class TestMaintenance:
    def test_ensure_indexes(self, repo, collection):
        repo.ensure_indexes()

        names = [call.kwargs["name"] for call in collection.create_index.call_args_list]
        assert names == ["productId_unique", "category_stock", "name_category_text"]
        assert collection.create_index.call_args_list[0].kwargs["unique"] is True

    def test_insert_many_empty(self, repo, collection):
        assert repo.insert_many([]) == 0
        collection.insert_many.assert_not_called()

    def test_insert_many(self, repo, collection):
        collection.insert_many.return_value.inserted_ids = ["a", "b"]
        assert repo.insert_many([_product(), _product()]) == 2
        assert collection.insert_many.call_args.kwargs["ordered"] is True


class TestGetProductRepository:
    @pytest.fixture(autouse=True)
    def _fresh_state(self, monkeypatch, collection):
        from modules.products import repositories

        monkeypatch.setattr(repositories, "_indexes_ready", threading.Event())
        monkeypatch.setattr(repositories, "get_collection", lambda name: collection)

    def test_indexes_ensured_once(self, collection):
        from modules.products.repositories import get_product_repository

        first = get_product_repository()
        get_product_repository()

        assert isinstance(first, ProductMongoRepository)
        assert collection.create_index.call_count == 3

    def test_retries_after_failure(self, collection):
        from modules.products.repositories import get_product_repository

        collection.create_index.side_effect = [ServerSelectionTimeoutError("down"), None, None, None]

        get_product_repository()
        get_product_repository()

        assert collection.create_index.call_count == 4
