"""User search backend: GET /users/search."""

from typing import Any

from src.contracts.discover_v1 import Category, FilterMap
from src.orchestrators.discover.interface import SourceAdapter


class UserSearchBackend(SourceAdapter):
    category = Category.USERS
    path = "/users/search"

    def translate_filters(self, filters: FilterMap) -> dict[str, Any]:
        role = filters.get("role")
        return {"role": str(role).upper()} if role else {}
