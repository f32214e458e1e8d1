"""Product write-time validation.

``validate_product`` is a pure function: it takes the candidate payload
(create body or an update merged over the stored record) and reports
*every* violated rule at once so the client can fix them in one round
trip.  When the candidate is valid, ``ValidationResult.cleaned`` holds the
normalised values ready to persist.

Rules, checked in order:
1. productId, name, mrpPrice and stock are present and non-empty.
2. mrpPrice and stock are non-negative numbers (stock a whole number
   that fits a signed 64-bit integer).
3. name is at most 200 characters.
4. category, if supplied, belongs to the fixed enumeration (never
   defaulted when invalid).
5. expiryDate, if supplied, matches ``YYYY-MM-DD``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from modules.products.constants import (
    DEFAULT_CATEGORY,
    DEFAULT_DISCOUNTS,
    DEFAULT_IMAGE_URL,
    EXPIRY_DATE_PATTERN,
    MAX_STORED_INT,
    NAME_MAX_LENGTH,
    PRODUCT_CATEGORIES,
    REQUIRED_FIELDS,
)

_REQUIRED_MESSAGES = {
    "productId": "Product ID is required",
    "name": "Product name is required",
    "mrpPrice": "MRP price is required",
    "stock": "Stock quantity is required",
}

_FIELD_LABELS = {
    "productId": "Product ID",
    "name": "Product name",
    "image": "Image",
    "category": "Category",
    "discounts": "Discounts",
    "expiryDate": "Expiry date",
}


@dataclass(frozen=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    cleaned: dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def missing_required_fields(payload: Mapping[str, Any]) -> list[str]:
    """Names of required fields that are absent, ``None`` or empty strings."""
    return [name for name in REQUIRED_FIELDS if is_blank(payload.get(name))]


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


class _Invalid(Exception):
    pass


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise _Invalid


def _as_number(value: Any) -> float:
    if isinstance(value, bool):
        raise _Invalid
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(Decimal(value.strip()))
        except InvalidOperation:
            raise _Invalid from None
    else:
        raise _Invalid
    if number != number or number in (float("inf"), float("-inf")):
        raise _Invalid
    return number


def _as_whole_number(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    number = _as_number(value)
    if not number.is_integer():
        raise _Invalid
    return int(number)


def _optional_text(
    candidate: Mapping[str, Any], name: str, errors: list[str]
) -> Optional[str]:
    value = candidate.get(name)
    if value is None:
        return None
    try:
        return _as_text(value)
    except _Invalid:
        errors.append(f"{_FIELD_LABELS[name]} must be a string")
        return None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_product(candidate: Mapping[str, Any]) -> ValidationResult:
    """Validate a full product candidate, collecting every violation."""
    errors: list[str] = []
    cleaned: dict[str, Any] = {}

    # 1. Required presence
    missing = set(missing_required_fields(candidate))
    for name in REQUIRED_FIELDS:
        if name in missing:
            errors.append(_REQUIRED_MESSAGES[name])

    # 2. Numeric constraints
    if "mrpPrice" not in missing:
        try:
            price = _as_number(candidate["mrpPrice"])
        except _Invalid:
            errors.append("MRP price must be a number")
        else:
            if price < 0:
                errors.append("Price cannot be negative")
            cleaned["mrpPrice"] = price

    if "stock" not in missing:
        try:
            stock = _as_whole_number(candidate["stock"])
        except _Invalid:
            errors.append("Stock must be a whole number")
        else:
            if stock < 0:
                errors.append("Stock cannot be negative")
            elif stock > MAX_STORED_INT:
                errors.append("Stock is too large")
            cleaned["stock"] = stock

    # 3. Text fields
    for name in ("productId", "name"):
        if name in missing:
            continue
        text = _optional_text(candidate, name, errors)
        if text is not None:
            cleaned[name] = text

    if len(cleaned.get("name", "")) > NAME_MAX_LENGTH:
        errors.append(f"Product name cannot exceed {NAME_MAX_LENGTH} characters")

    image = _optional_text(candidate, "image", errors)
    cleaned["image"] = image or DEFAULT_IMAGE_URL

    discounts = _optional_text(candidate, "discounts", errors)
    cleaned["discounts"] = discounts if discounts is not None else DEFAULT_DISCOUNTS

    # 4. Category enumeration
    category = candidate.get("category")
    if category is None:
        cleaned["category"] = DEFAULT_CATEGORY.value
    elif isinstance(category, str) and category.strip() in PRODUCT_CATEGORIES:
        cleaned["category"] = category.strip()
    else:
        errors.append("Category must be one of the predefined values")

    # 5. Expiry date format
    expiry = candidate.get("expiryDate")
    if not is_blank(expiry):
        if isinstance(expiry, str) and EXPIRY_DATE_PATTERN.match(expiry.strip()):
            cleaned["expiryDate"] = expiry.strip()
        else:
            errors.append("Expiry date must be in YYYY-MM-DD format")
    else:
        cleaned["expiryDate"] = None

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(cleaned=cleaned)
