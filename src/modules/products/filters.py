"""Translate listing parameters into a store query.

``build_product_query`` turns ``ProductListParams`` into a
``ProductQuery``: the filter criteria plus the ``(skip, limit)`` paging
directive and sort order.  ``ProductQuery.to_mongo_filter`` renders the
criteria as a MongoDB filter document, either with a ``$text`` search
(relevance-ranked, needs the text index) or with a case-insensitive
substring match over the same fields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

from pymongo import DESCENDING

from modules.products.dtos import MAX_PAGE, MAX_PAGE_SIZE, ProductListParams

SEARCH_FIELDS = ("name", "category")

NEWEST_FIRST: tuple[tuple[str, int], ...] = (("createdAt", DESCENDING), ("_id", DESCENDING))


@dataclass(frozen=True)
class ProductQuery:
    category: Optional[str] = None
    in_stock: bool = False
    search: Optional[str] = None
    page: int = 1
    limit: int = 50
    sort: tuple[tuple[str, int], ...] = NEWEST_FIRST

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def to_mongo_filter(self, text_search: bool = True) -> dict[str, Any]:
        mongo_filter: dict[str, Any] = {}
        if self.category:
            mongo_filter["category"] = self.category
        if self.in_stock:
            mongo_filter["stock"] = {"$gt": 0}
        if self.search:
            if text_search:
                mongo_filter["$text"] = {"$search": self.search}
            else:
                pattern = re.escape(self.search)
                mongo_filter["$or"] = [
                    {field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS
                ]
        return mongo_filter


def build_product_query(params: ProductListParams) -> ProductQuery:
    return ProductQuery(
        category=params.category,
        in_stock=params.in_stock,
        search=params.search,
        page=min(params.page, MAX_PAGE),
        limit=min(params.limit, MAX_PAGE_SIZE),
    )
