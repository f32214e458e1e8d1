"""MongoDB implementation of the Product repository.

Satisfies ``IProductRepository`` with pymongo.  Error handling follows
the Null Object pattern for lookups (``None`` when nothing matches) and
translates every driver failure into a domain exception, so callers
never see a ``PyMongoError``:

- duplicate ``productId`` on insert -> ``ProductAlreadyExists`` (the
  unique index is the authoritative uniqueness guarantee);
- anything else -> ``ProductPersistenceError``.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Mapping, Optional

import structlog
from pymongo import ASCENDING, TEXT, ReturnDocument
from pymongo.collection import Collection
from bson.errors import InvalidDocument
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from modules.products.constants import EDITABLE_FIELDS
from modules.products.exceptions import ProductAlreadyExists, ProductPersistenceError
from modules.products.filters import SEARCH_FIELDS, ProductQuery
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

# Server error code for "text index required for $text query".
INDEX_NOT_FOUND = 27

PRODUCT_ID_INDEX = "productId_unique"
CATEGORY_STOCK_INDEX = "category_stock"
TEXT_SEARCH_INDEX = "name_category_text"


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (PyMongoError, InvalidDocument, OverflowError) as exc:
        logger.error("product.persistence_error", operation=operation, error=str(exc))
        raise ProductPersistenceError(f"{operation} failed: {exc}") from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductMongoRepository(IProductRepository):
    """Concrete Product repository backed by a pymongo ``Collection``."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, id: str) -> Optional[Product]:
        with _translate_errors("find_by_id"):
            document = self._collection.find_one({"productId": id})
        return Product.from_document(document) if document else None

    def find_many(self, query: ProductQuery) -> tuple[list[Product], int]:
        """Fetch one page and the total count concurrently.

        A ``$text`` search is tried first; if the store has no text index
        the same query is re-run as a case-insensitive substring match.
        """
        with _translate_errors("find_many"):
            try:
                return self._find_many(query, text_search=bool(query.search))
            except OperationFailure as exc:
                if not query.search or exc.code != INDEX_NOT_FOUND:
                    raise
                logger.warning("product.text_index_missing", search=query.search)
                return self._find_many(query, text_search=False)

    def _find_many(
        self, query: ProductQuery, text_search: bool
    ) -> tuple[list[Product], int]:
        mongo_filter = query.to_mongo_filter(text_search=text_search)
        projection: Optional[dict[str, Any]] = None
        sort: list[tuple[str, Any]] = list(query.sort)
        if text_search:
            projection = {"score": {"$meta": "textScore"}}
            sort.insert(0, ("score", {"$meta": "textScore"}))

        with ThreadPoolExecutor(max_workers=2) as pool:
            page = pool.submit(
                self._fetch_page, mongo_filter, projection, sort, query.skip, query.limit
            )
            total = pool.submit(self._collection.count_documents, mongo_filter)
            documents = page.result()
            count = total.result()

        return [Product.from_document(doc) for doc in documents], count

    def _fetch_page(
        self,
        mongo_filter: Mapping[str, Any],
        projection: Optional[Mapping[str, Any]],
        sort: list[tuple[str, Any]],
        skip: int,
        limit: int,
    ) -> list[Mapping[str, Any]]:
        cursor = self._collection.find(mongo_filter, projection).sort(sort)
        return list(cursor.skip(skip).limit(limit))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, entity: Product) -> Product:
        now = _utcnow()
        stored = entity.model_copy(update={"created_at": now, "updated_at": now})
        with _translate_errors("insert"):
            try:
                result = self._collection.insert_one(stored.to_document())
            except DuplicateKeyError as exc:
                logger.warning("product.duplicate_id", product_id=entity.product_id)
                raise ProductAlreadyExists(
                    f"Product with ID '{entity.product_id}' already exists"
                ) from exc
        return stored.model_copy(update={"object_id": str(result.inserted_id)})

    def update_by_id(self, id: str, changes: Mapping[str, Any]) -> Optional[Product]:
        """Apply only the supplied editable fields; ``productId`` never changes.

        ``None`` values remove optional fields (e.g. clearing ``expiryDate``).
        """
        fields = {
            key: value
            for key, value in changes.items()
            if key in EDITABLE_FIELDS and key != "productId"
        }
        update: dict[str, Any] = {
            "$set": {key: value for key, value in fields.items() if value is not None}
        }
        update["$set"]["updatedAt"] = _utcnow()
        cleared = [key for key, value in fields.items() if value is None]
        if cleared:
            update["$unset"] = {key: "" for key in cleared}

        with _translate_errors("update_by_id"):
            document = self._collection.find_one_and_update(
                {"productId": id},
                update,
                return_document=ReturnDocument.AFTER,
            )
        return Product.from_document(document) if document else None

    def delete_by_id(self, id: str) -> Optional[Product]:
        with _translate_errors("delete_by_id"):
            document = self._collection.find_one_and_delete({"productId": id})
        return Product.from_document(document) if document else None

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def ensure_indexes(self) -> None:
        with _translate_errors("ensure_indexes"):
            self._collection.create_index(
                [("productId", ASCENDING)], unique=True, name=PRODUCT_ID_INDEX
            )
            self._collection.create_index(
                [("category", ASCENDING), ("stock", ASCENDING)],
                name=CATEGORY_STOCK_INDEX,
            )
            self._collection.create_index(
                [(field, TEXT) for field in SEARCH_FIELDS], name=TEXT_SEARCH_INDEX
            )
        logger.info("product.indexes_ensured", collection=self._collection.name)

    def delete_all(self) -> int:
        with _translate_errors("delete_all"):
            result = self._collection.delete_many({})
        return result.deleted_count

    def insert_many(self, products: Iterable[Product]) -> int:
        now = _utcnow()
        documents = [
            product.model_copy(update={"created_at": now, "updated_at": now}).to_document()
            for product in products
        ]
        if not documents:
            return 0
        with _translate_errors("insert_many"):
            result = self._collection.insert_many(documents, ordered=True)
        return len(result.inserted_ids)
