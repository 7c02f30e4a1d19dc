"""Query composition and pagination for product listings.

``ProductQueryComposer`` turns a validated ``ProductListQueryDTO`` into a
``ProductQuery``: the filter data understood by ``ProductFilter``, an
ordering over whitelisted columns, and an offset/limit window.  The
repository applies the same filter to both the count and the page fetch,
so ``total`` always describes the rows being paged.

``build_pagination`` derives the page metadata from the total:
an empty result has ``total_pages == 0`` and no next/previous page; a
page past the end simply yields no rows.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from modules.products.constants import SORT_COLUMNS, SortOrder

if TYPE_CHECKING:
    from modules.products.dtos import ProductListQueryDTO
    from modules.products.models import Product


@dataclass(frozen=True)
class ProductQuery:
    """Storage-level listing request."""

    filters: Dict[str, Any] = field(default_factory=dict)
    ordering: Tuple[str, ...] = ("-created_at", "-id")
    offset: int = 0
    limit: int = 10


@dataclass(frozen=True)
class PaginationMeta:
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


@dataclass(frozen=True)
class ProductPage:
    items: List[Product]
    pagination: PaginationMeta


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit) if total else 0
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class ProductQueryComposer:
    """Builds bounded, whitelisted listing queries from untrusted input."""

    def compose(self, dto: ProductListQueryDTO) -> ProductQuery:
        filters: Dict[str, Any] = {}
        if dto.category:
            filters["category"] = dto.category
        if dto.search:
            filters["search"] = dto.search
        if dto.min_price is not None:
            filters["min_price"] = dto.min_price
        if dto.max_price is not None:
            filters["max_price"] = dto.max_price
        if dto.in_stock is not None:
            filters["in_stock"] = dto.in_stock

        column = SORT_COLUMNS[dto.sort_by]
        prefix = "-" if dto.sort_order == SortOrder.DESC else ""

        return ProductQuery(
            filters=filters,
            ordering=(f"{prefix}{column}", f"{prefix}id"),
            offset=(dto.page - 1) * dto.limit,
            limit=dto.limit,
        )
