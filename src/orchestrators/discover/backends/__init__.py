from collections.abc import Iterable

import httpx

from src.contracts.discover_v1 import Category
from src.orchestrators.discover.backends.artisans import ArtisanSearchBackend
from src.orchestrators.discover.backends.posts import PostListBackend
from src.orchestrators.discover.backends.products import ProductSearchBackend
from src.orchestrators.discover.backends.users import UserSearchBackend
from src.orchestrators.discover.interface import SourceAdapter

ADAPTER_CLASSES: tuple[type[SourceAdapter], ...] = (
    ArtisanSearchBackend,
    UserSearchBackend,
    PostListBackend,
    ProductSearchBackend,
)


def build_adapters(
    client: httpx.AsyncClient,
    classes: Iterable[type[SourceAdapter]] = ADAPTER_CLASSES,
) -> dict[Category, SourceAdapter]:
    """One adapter per domain category, sharing a single HTTP client."""
    return {cls.category: cls(client) for cls in classes}


__all__ = [
    "ADAPTER_CLASSES",
    "ArtisanSearchBackend",
    "PostListBackend",
    "ProductSearchBackend",
    "UserSearchBackend",
    "build_adapters",
]
