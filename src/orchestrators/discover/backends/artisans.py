"""Artisan (creator) search backend: GET /artisans/search."""

from typing import Any

from src.contracts.discover_v1 import Category, FilterMap
from src.orchestrators.discover.interface import SourceAdapter


class ArtisanSearchBackend(SourceAdapter):
    category = Category.ARTISANS
    path = "/artisans/search"
    sort_fields = frozenset({"createdAt", "rating", "followerCount"})

    def translate_filters(self, filters: FilterMap) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if filters.get("category"):
            params["categoryId"] = filters["category"]
        specialties = filters.get("specialties")
        if isinstance(specialties, str):
            specialties = [s.strip() for s in specialties.split(",") if s.strip()]
        if specialties:
            params["specialties"] = list(specialties)
        verified = filters.get("verified")
        if isinstance(verified, bool):
            params["isVerified"] = str(verified).lower()
        return params
