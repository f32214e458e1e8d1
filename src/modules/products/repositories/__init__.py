"""Product repositories package."""

import threading

import structlog
from django.conf import settings

from modules.core.mongo import get_collection
from modules.products.exceptions import ProductPersistenceError
from modules.products.repositories.interfaces import IProductRepository
from modules.products.repositories.mongo_repository import ProductMongoRepository

__all__ = ["IProductRepository", "ProductMongoRepository", "get_product_repository"]

logger = structlog.get_logger(__name__)

_indexes_ready = threading.Event()


def get_product_repository() -> IProductRepository:
    """Repository bound to the configured products collection.

    The first successful call in a process makes sure the unique
    ``productId`` index exists; until it does, later calls keep trying.
    """
    repository = ProductMongoRepository(get_collection(settings.MONGO_PRODUCTS_COLLECTION))
    if not _indexes_ready.is_set():
        try:
            repository.ensure_indexes()
        except ProductPersistenceError:
            logger.warning("product.indexes_not_ensured")
        else:
            _indexes_ready.set()
    return repository
