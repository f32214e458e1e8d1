"""Product record and its derived attributes.

The document store keeps products as plain documents with camelCase
field names.  ``Product`` is the immutable in-process view of one such
document; it performs no business validation itself (see
``modules.products.validators``).

Derived attributes (``formattedPrice``, ``isInStock``, ``isExpired``) are
pure functions over the record.  They are evaluated at serialization time
and never written back to the store.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.constants import (
    CURRENCY_SYMBOL,
    DEFAULT_CATEGORY,
    DEFAULT_DISCOUNTS,
    DEFAULT_IMAGE_URL,
    DEFAULT_STOCK,
    ProductCategory,
)


class Product(BaseModel):
    """A grocery product as persisted in the ``products`` collection.

    Fields use snake_case in Python and their camelCase alias in the
    store.  Unknown document keys (``__v``, text ``score``...) are ignored.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        use_enum_values=True,
    )

    object_id: Optional[str] = Field(default=None, alias="_id")
    product_id: str = Field(alias="productId")
    name: str
    mrp_price: float = Field(alias="mrpPrice")
    image: str = DEFAULT_IMAGE_URL
    stock: int = DEFAULT_STOCK
    category: ProductCategory = Field(default=DEFAULT_CATEGORY, validate_default=True)
    discounts: str = DEFAULT_DISCOUNTS
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("object_id", mode="before")
    @classmethod
    def stringify_object_id(cls, v: Any) -> Optional[str]:
        return str(v) if v is not None else None

    # ------------------------------------------------------------------
    # Store mapping
    # ------------------------------------------------------------------

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Product:
        """Build a ``Product`` from a raw store document."""
        return cls.model_validate(dict(document))

    def to_document(self) -> dict[str, Any]:
        """Return the camelCase document to persist (no ``_id``, no ``None``)."""
        return self.model_dump(by_alias=True, exclude={"object_id"}, exclude_none=True)

    def __str__(self) -> str:
        return f"{self.product_id} - {self.name}"


# ---------------------------------------------------------------------------
# Derived attributes
# ---------------------------------------------------------------------------


def formatted_price(product: Product) -> str:
    return f"{CURRENCY_SYMBOL}{product.mrp_price:.2f}"


def is_in_stock(product: Product) -> bool:
    return product.stock > 0


def is_expired(product: Product, now: Optional[datetime] = None) -> bool:
    """``True`` when the expiry date (midnight UTC) lies before ``now``.

    Absent or unparseable dates are never considered expired.
    """
    if not product.expiry_date:
        return False
    try:
        expiry = datetime.strptime(product.expiry_date, "%Y-%m-%d")
    except ValueError:
        return False
    now = now or datetime.now(timezone.utc)
    return expiry.replace(tzinfo=timezone.utc) < now
