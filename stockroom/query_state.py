# stockroom/query_state.py
"""Canonical description of which products the user wants to see.

Every transition returns a new ``QueryState``.  Changing the search term,
category or sort resets the page to 1 because the old pagination no longer
describes the result set.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping


class SortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    QUANTITY = "quantity"
    CREATED_AT = "createdAt"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortOrder":
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


@dataclass(frozen=True)
class QueryState:
    search_term: str = ""
    category: str | None = None
    sort_field: SortField = SortField.NAME
    sort_order: SortOrder = SortOrder.ASC
    page: int = 1

    def set_search_term(self, term: str) -> "QueryState":
        return replace(self, search_term=term or "", page=1)

    def set_category(self, category: str | None) -> "QueryState":
        return replace(self, category=category or None, page=1)

    def set_sort_field(self, sort_field: SortField | str) -> "QueryState":
        return replace(self, sort_field=SortField(sort_field), page=1)

    def set_sort_order(self, sort_order: SortOrder | str) -> "QueryState":
        return replace(self, sort_order=SortOrder(sort_order), page=1)

    def toggle_sort_order(self) -> "QueryState":
        return replace(self, sort_order=self.sort_order.flipped(), page=1)

    def set_page(self, page: int, total_pages: int) -> "QueryState":
        """Move to ``page`` if it lies within ``1..total_pages``.

        Out of range requests return ``self`` unchanged.
        """
        if page < 1 or page > total_pages:
            return self
        return replace(self, page=page)

    def to_params(self, limit: int) -> dict[str, Any]:
        """Query string for ``GET /products``."""
        params: dict[str, Any] = {
            "page": self.page,
            "limit": limit,
            "sort": self.sort_field.value,
            "order": self.sort_order.value,
            "search": self.search_term,
        }
        if self.category is not None:
            params["category"] = self.category
        return params

    def to_dict(self) -> dict[str, Any]:
        return {
            "search": self.search_term,
            "category": self.category,
            "sort": self.sort_field.value,
            "order": self.sort_order.value,
            "page": self.page,
        }

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "QueryState":
        """Lenient parse of browser or CLI arguments; bad values use defaults."""
        try:
            sort_field = SortField(args.get("sort") or SortField.NAME.value)
        except ValueError:
            sort_field = SortField.NAME
        try:
            sort_order = SortOrder(args.get("order") or SortOrder.ASC.value)
        except ValueError:
            sort_order = SortOrder.ASC
        try:
            page = max(int(args.get("page") or 1), 1)
        except (TypeError, ValueError):
            page = 1
        return cls(
            search_term=str(args.get("search") or ""),
            category=args.get("category") or None,
            sort_field=sort_field,
            sort_order=sort_order,
            page=page,
        )
