"""Product domain exceptions.

Raised by the validator and the repository.  The Service Layer catches
every one of them and turns it into a ``ServiceResult`` kind, so none of
these (and no raw driver exception) reaches the HTTP layer.
"""

from __future__ import annotations


class ProductError(Exception):
    """Base class for product domain failures."""


class ProductValidationError(ProductError):
    """One or more product fields are missing or invalid."""

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = list(details or [])


class ProductAlreadyExists(ProductError):
    """A product with the same ``productId`` already exists.

    Raised by the pre-check in the service and, authoritatively, by the
    repository when the store's unique index rejects an insert.
    """


class ProductNotFound(ProductError):
    """No product is stored under the requested ``productId``."""


class ProductPersistenceError(ProductError):
    """The backing store is unreachable or the operation failed."""
