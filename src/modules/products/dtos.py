"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  These are
the contracts between the API layer and the Service layer.

- ``ProductListParams``: raw listing parameters taken from the query
  string, leniently normalised (bad paging values fall back to defaults).
- ``Pagination``: pagination metadata returned alongside a page.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
# Keeps (page - 1) * limit within a signed 64-bit skip.
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE

_TRUTHY = {"true", "1", "yes"}


def _positive_int_or_none(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number > 0 else None


class ProductListParams(BaseModel):
    """Immutable listing parameters.

    ``page`` and ``limit`` never come out of here zero, negative or
    unparseable.  ``page`` is clamped to ``MAX_PAGE`` and ``limit`` to
    ``MAX_PAGE_SIZE``; ``from_query`` may lower the latter further.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: Optional[str] = None
    in_stock: bool = Field(default=False, alias="inStock")
    search: Optional[str] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_SIZE

    @field_validator("category", "search", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("in_stock", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> bool:
        if isinstance(v, bool):
            return v
        return str(v).strip().lower() in _TRUTHY if v is not None else False

    @field_validator("page", mode="before")
    @classmethod
    def normalise_page(cls, v: Any) -> int:
        return min(_positive_int_or_none(v) or DEFAULT_PAGE, MAX_PAGE)

    @field_validator("limit", mode="before")
    @classmethod
    def normalise_limit(cls, v: Any) -> int:
        return min(_positive_int_or_none(v) or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

    @classmethod
    def from_query(
        cls,
        query: Any,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> ProductListParams:
        """Build params from a query-string mapping (``QueryDict`` or dict)."""
        limit = _positive_int_or_none(query.get("limit")) or default_limit
        return cls(
            category=query.get("category"),
            inStock=query.get("inStock"),
            search=query.get("search"),
            page=query.get("page"),
            limit=min(limit, max_limit),
        )


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> Pagination:
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))
