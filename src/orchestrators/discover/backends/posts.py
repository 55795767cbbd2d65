"""Post listing backend: GET /posts, free text goes in the ``search`` param."""

from typing import Any

from src.contracts.discover_v1 import Category, FilterMap
from src.orchestrators.discover.interface import SourceAdapter


class PostListBackend(SourceAdapter):
    category = Category.POSTS
    path = "/posts"
    text_param = "search"
    sort_fields = frozenset(
        {"createdAt", "publishedAt", "viewCount", "likeCount", "commentCount"}
    )

    def translate_filters(self, filters: FilterMap) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if filters.get("tag"):
            params["tag"] = filters["tag"]
        if filters.get("type"):
            params["type"] = str(filters["type"]).upper()
        return params
