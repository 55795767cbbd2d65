"""Product search backend: GET /products/search."""

from typing import Any

from src.contracts.discover_v1 import Category, FilterMap
from src.orchestrators.discover.constants import SortOption
from src.orchestrators.discover.interface import SourceAdapter

# price sorts arrive as one generic value and split into column + direction
_PRICE_SORTS = {
    SortOption.PRICE_ASC: ("price", "asc"),
    SortOption.PRICE_DESC: ("price", "desc"),
}


class ProductSearchBackend(SourceAdapter):
    category = Category.PRODUCTS
    path = "/products/search"
    sort_fields = frozenset({"createdAt", "viewCount", "price", "rating", "salesCount"})

    def _sort_params(self, filters: FilterMap) -> dict[str, Any]:
        sort = filters.get("sort")
        price_sort = _PRICE_SORTS.get(sort) if isinstance(sort, str) else None
        if price_sort:
            return {"sortBy": price_sort[0], "sortOrder": price_sort[1]}
        return super()._sort_params(filters)

    def translate_filters(self, filters: FilterMap) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if filters.get("category"):
            params["categoryId"] = filters["category"]
        tags = filters.get("tags")
        if isinstance(tags, str):
            tags = [t.strip() for t in tags.split(",") if t.strip()]
        if tags:
            params["tags"] = list(tags)
        for generic, native in (("min_price", "minPrice"), ("max_price", "maxPrice")):
            value = filters.get(generic)
            if value is None or value == "":
                continue
            try:
                params[native] = float(value)
            except (TypeError, ValueError):
                continue
        return params
