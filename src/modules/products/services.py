"""Product service layer (Use Cases).

Orchestrates validation, uniqueness checks and repository calls for the
Product collection, delegating persistence to the injected
``IProductRepository``.

Every operation returns a ``ServiceResult`` instead of raising: domain
exceptions coming from the validator or the repository are caught here
and classified into a ``ResultKind``.  The HTTP layer only maps kinds to
status codes and renders the envelope.

Business rules enforced here:
- ``productId`` is unique (fast pre-check; the store's unique index is
  authoritative and reported the same way).
- ``productId`` is immutable: the path id always wins on update and a
  body trying to change it is rejected.
- Every write is fully re-validated; negative price/stock and unknown
  categories are rejected, never coerced.
- A null image, category or discounts on update leaves the stored value
  in place instead of resetting it to the default.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Union

import structlog

from modules.products.constants import EDITABLE_FIELDS
from modules.products.dtos import Pagination, ProductListParams
from modules.products.exceptions import (
    ProductAlreadyExists,
    ProductNotFound,
    ProductPersistenceError,
    ProductValidationError,
)
from modules.products.filters import build_product_query
from modules.products.models import Product
from modules.products.validators import (
    is_blank,
    missing_required_fields,
    validate_product,
)

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

# On update, an explicit null for these keeps the stored value.
KEEP_STORED_WHEN_NULL = frozenset({"image", "category", "discounts"})


class ResultKind(enum.Enum):
    OK = "ok"
    CREATED = "created"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class ServiceResult:
    """Outcome of a service operation, convertible to the response envelope."""

    kind: ResultKind
    data: Union[Product, List[Product], None] = None
    error: Optional[str] = None
    message: Optional[str] = None
    details: Optional[List[str]] = None
    pagination: Optional[Pagination] = None

    @property
    def success(self) -> bool:
        return self.kind in (ResultKind.OK, ResultKind.CREATED)

    def to_envelope(
        self, render: Optional[Callable[[Any], Any]] = None
    ) -> Dict[str, Any]:
        """``{success, data?, error?, message?, details?, pagination?}``.

        ``render`` converts ``data`` (a product or a list of products)
        into its public representation.
        """
        envelope: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            envelope["data"] = render(self.data) if render else self.data
        if self.error is not None:
            envelope["error"] = self.error
        if self.message is not None:
            envelope["message"] = self.message
        if self.details is not None:
            envelope["details"] = self.details
        if self.pagination is not None:
            envelope["pagination"] = self.pagination.model_dump()
        return envelope


def _not_found(product_id: str) -> ServiceResult:
    return ServiceResult(
        kind=ResultKind.NOT_FOUND,
        error="Product not found",
        message=f"No product found with ID: {product_id}",
    )


def _missing_id() -> ServiceResult:
    return ServiceResult(kind=ResultKind.BAD_REQUEST, error="Product ID is required")


def _invalid(exc: ProductValidationError) -> ServiceResult:
    return ServiceResult(
        kind=ResultKind.BAD_REQUEST, error=str(exc), details=exc.details
    )


def _body_not_object() -> ServiceResult:
    return ServiceResult(
        kind=ResultKind.BAD_REQUEST, error="Request body must be a JSON object"
    )


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    ``expose_errors`` adds the underlying storage error text to server
    error results; it is meant for development only.
    """

    def __init__(self, repository: IProductRepository, expose_errors: bool = False) -> None:
        self._repo = repository
        self._expose_errors = expose_errors

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(self, payload: Any) -> ServiceResult:
        if not isinstance(payload, Mapping):
            return _body_not_object()
        try:
            product = self._create(payload)
        except ProductValidationError as exc:
            return _invalid(exc)
        except ProductAlreadyExists:
            return ServiceResult(
                kind=ResultKind.CONFLICT, error="Product with this ID already exists"
            )
        except ProductPersistenceError as exc:
            return self._server_error("creating product", exc)
        return ServiceResult(
            kind=ResultKind.CREATED,
            data=product,
            message="Product created successfully",
        )

    def _create(self, payload: Mapping[str, Any]) -> Product:
        missing = missing_required_fields(payload)
        if missing:
            raise ProductValidationError(
                "Missing required fields: productId, name, mrpPrice, and stock are required",
                details=missing,
            )

        product_id = str(payload["productId"]).strip()
        log = logger.bind(product_id=product_id)

        if self._repo.find_by_id(product_id) is not None:
            log.warning("product.duplicate_id")
            raise ProductAlreadyExists(f"Product with ID '{product_id}' already exists")

        result = validate_product({key: payload.get(key) for key in EDITABLE_FIELDS})
        if not result.is_valid:
            log.info("product.validation_failed", errors=result.errors)
            raise ProductValidationError("Validation failed", details=result.errors)

        product = self._repo.insert(Product.model_validate(result.cleaned))
        log.info("product.created", name=product.name, category=product.category)
        return product

    def update_product(self, product_id: Any, payload: Any) -> ServiceResult:
        if is_blank(product_id):
            return _missing_id()
        if not isinstance(payload, Mapping):
            return _body_not_object()
        product_id = str(product_id).strip()

        body_id = payload.get("productId")
        if not is_blank(body_id) and str(body_id).strip() != product_id:
            logger.warning(
                "product.id_change_rejected", product_id=product_id, body_id=str(body_id)
            )
            return ServiceResult(kind=ResultKind.BAD_REQUEST, error="Cannot change product ID")

        try:
            product = self._update(product_id, payload)
        except ProductValidationError as exc:
            return _invalid(exc)
        except ProductNotFound:
            return _not_found(product_id)
        except ProductPersistenceError as exc:
            return self._server_error("updating product", exc)
        return ServiceResult(
            kind=ResultKind.OK,
            data=product,
            message="Product updated successfully",
        )

    def _update(self, product_id: str, payload: Mapping[str, Any]) -> Product:
        existing = self._repo.find_by_id(product_id)
        if existing is None:
            raise ProductNotFound(product_id)

        patch = {
            key: payload[key]
            for key in EDITABLE_FIELDS
            if key in payload
            and not (key in KEEP_STORED_WHEN_NULL and payload[key] is None)
        }
        patch["productId"] = product_id
        merged = {**existing.to_document(), **patch}

        result = validate_product({key: merged.get(key) for key in EDITABLE_FIELDS})
        if not result.is_valid:
            logger.info(
                "product.validation_failed", product_id=product_id, errors=result.errors
            )
            raise ProductValidationError("Validation failed", details=result.errors)

        changes = {key: result.cleaned.get(key) for key in patch if key != "productId"}
        product = self._repo.update_by_id(product_id, changes)
        if product is None:
            raise ProductNotFound(product_id)
        logger.info("product.updated", product_id=product_id, fields=sorted(changes))
        return product

    def delete_product(self, product_id: Any) -> ServiceResult:
        if is_blank(product_id):
            return _missing_id()
        product_id = str(product_id).strip()
        try:
            product = self._repo.delete_by_id(product_id)
        except ProductPersistenceError as exc:
            return self._server_error("deleting product", exc)
        if product is None:
            return _not_found(product_id)
        logger.info("product.deleted", product_id=product_id)
        return ServiceResult(
            kind=ResultKind.OK,
            data=product,
            message="Product deleted successfully",
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, params: ProductListParams) -> ServiceResult:
        """Return one page of products with pagination metadata.

        An empty match is a normal result: ``[]`` with ``total == 0``.
        """
        query = build_product_query(params)
        try:
            products, total = self._repo.find_many(query)
        except ProductPersistenceError as exc:
            return self._server_error("fetching products", exc)
        return ServiceResult(
            kind=ResultKind.OK,
            data=products,
            pagination=Pagination.build(query.page, query.limit, total),
        )

    def get_product(self, product_id: Any) -> ServiceResult:
        if is_blank(product_id):
            return _missing_id()
        product_id = str(product_id).strip()
        try:
            product = self._repo.find_by_id(product_id)
        except ProductPersistenceError as exc:
            return self._server_error("fetching product", exc)
        if product is None:
            return _not_found(product_id)
        return ServiceResult(kind=ResultKind.OK, data=product)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _server_error(self, action: str, exc: ProductPersistenceError) -> ServiceResult:
        logger.error("product.operation_failed", action=action, error=str(exc))
        return ServiceResult(
            kind=ResultKind.SERVER_ERROR,
            error=f"Internal server error while {action}",
            message=str(exc) if self._expose_errors else None,
        )
