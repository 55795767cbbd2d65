"""Discover Search Contract v1.

Defines the canonical types shared by the aggregator and its source adapters:
  - Query model (Category, SearchQuery) driving every dispatch
  - Per-source request/response (SearchRequest, SourcePage, SourceResult)
  - The published read model (AggregatedResultSet, Pagination)

Items are opaque payloads returned by the domain services; the aggregator
only reads an identifier from them for list-key stability.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

Item = dict[str, Any]
FilterMap = Mapping[str, Any]

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class Category(StrEnum):
    """Discover tabs. Values match the ``type=`` URL parameter."""

    ALL = "all"
    ARTISANS = "artisans"
    USERS = "users"
    POSTS = "posts"
    PRODUCTS = "products"

    @classmethod
    def sources(cls) -> list[Category]:
        """The four searchable domains, in tab order."""
        return [cls.ARTISANS, cls.USERS, cls.POSTS, cls.PRODUCTS]

    @classmethod
    def parse(cls, value: str | None, default: Category | None = None) -> Category:
        """Lenient parse for URL/CLI input; unknown values fall back to ``default``."""
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return default if default is not None else cls.ALL


class ErrorKind(StrEnum):
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    TRANSPORT_ERROR = "transport_error"
    INVALID_RESPONSE = "invalid_response"
    UNEXPECTED = "unexpected"


def item_key(item: Item) -> str:
    """Stable list key for an opaque item: id, then _id, then slug."""
    for key in ("id", "_id", "slug"):
        value = item.get(key)
        if value not in (None, ""):
            return str(value)
    return ""


def _frozen_filters(value: Mapping[str, Any] | None) -> FilterMap:
    # copied, so later edits to the caller's dict cannot leak in
    return MappingProxyType(dict(value or {}))


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class SearchQuery(BaseModel):
    """Immutable snapshot of what the user is searching for."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Free-text search input")
    category: Category = Field(default=Category.ALL)
    filters: FilterMap = Field(
        default_factory=dict,
        validate_default=True,
        description="Read-only generic filter map shared across domains, e.g. {'sort': 'createdAt'}",
    )
    page: int = Field(default=1, ge=1)

    @field_validator("filters")
    @classmethod
    def _freeze_filters(cls, v: Any) -> FilterMap:
        return _frozen_filters(v)

    @field_serializer("filters")
    def _serialize_filters(self, v: FilterMap) -> dict[str, Any]:
        return dict(v)

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    @property
    def is_overview(self) -> bool:
        return self.category == Category.ALL

    def with_changes(self, **changes: Any) -> SearchQuery:
        """Copy with changes applied; any change of intent resets ``page`` to 1."""
        intent_keys = {"text", "category", "filters"}
        changed_intent = any(
            key in intent_keys and getattr(self, key) != value
            for key, value in changes.items()
        )
        if changed_intent and "page" not in changes:
            changes["page"] = 1
        return SearchQuery.model_validate({**self.model_dump(), **changes})


class SearchRequest(BaseModel):
    """Generic per-source request issued by the dispatcher."""

    model_config = ConfigDict(frozen=True)

    text: str
    filters: FilterMap = Field(default_factory=dict, validate_default=True)
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)

    @field_validator("filters")
    @classmethod
    def _freeze_filters(cls, v: Any) -> FilterMap:
        return _frozen_filters(v)

    @field_serializer("filters")
    def _serialize_filters(self, v: FilterMap) -> dict[str, Any]:
        return dict(v)


# ---------------------------------------------------------------------------
# Source results
# ---------------------------------------------------------------------------


class SourcePage(BaseModel):
    """One page as returned by a domain service."""

    items: list[Item] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)


class SourceResult(BaseModel):
    """Outcome of one adapter call, successful or not."""

    model_config = ConfigDict(frozen=True)

    source: Category
    items: list[Item] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    total_pages: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    failed: bool = False
    error_kind: ErrorKind | None = None
    error: str | None = None
    elapsed_ms: float = 0.0

    @field_validator("source")
    @classmethod
    def _source_is_domain(cls, v: Category) -> Category:
        if v == Category.ALL:
            raise ValueError("source must be one of the four domain categories")
        return v

    @model_validator(mode="after")
    def _failed_is_empty(self) -> SourceResult:
        if self.failed and (self.items or self.total or self.total_pages):
            raise ValueError("a failed source result must be empty")
        return self

    @classmethod
    def from_page(
        cls, source: Category, page: SourcePage, elapsed_ms: float = 0.0
    ) -> SourceResult:
        return cls(
            source=source,
            items=page.items,
            total=page.total,
            total_pages=page.total_pages,
            limit=page.limit,
            page=page.page,
            elapsed_ms=elapsed_ms,
        )

    @classmethod
    def failure(
        cls,
        source: Category,
        error_kind: ErrorKind,
        error: str | None = None,
        elapsed_ms: float = 0.0,
    ) -> SourceResult:
        return cls(
            source=source,
            failed=True,
            error_kind=error_kind,
            error=error,
            elapsed_ms=elapsed_ms,
        )


# ---------------------------------------------------------------------------
# Aggregated read model
# ---------------------------------------------------------------------------


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    total_pages: int = 0
    limit: int = 0
    page: int = 1


class AggregatedResultSet(BaseModel):
    """Published snapshot. Replaced wholesale on every accepted batch.

    In single-category mode only the queried category is present in
    ``by_category``/``totals``; absent means "not queried", not "zero".
    """

    model_config = ConfigDict(frozen=True)

    by_category: dict[Category, list[Item]] = Field(default_factory=dict)
    totals: dict[Category, int] = Field(default_factory=dict)
    generation: int = 0
    partial: bool = False
    query: SearchQuery | None = None
    pagination: Pagination | None = None
    failed_sources: list[Category] = Field(default_factory=list)

    @classmethod
    def empty(cls, generation: int = 0, query: SearchQuery | None = None) -> AggregatedResultSet:
        """Blank-query result: every category present and empty."""
        return cls(
            by_category={c: [] for c in Category.sources()},
            totals={c: 0 for c in Category.sources()},
            generation=generation,
            query=query,
        )

    @property
    def has_results(self) -> bool:
        return any(count > 0 for count in self.totals.values())

    @property
    def total_results(self) -> int:
        return sum(self.totals.values())

    @property
    def is_empty(self) -> bool:
        return not any(self.by_category.values())

    def keys_for(self, category: Category) -> list[str]:
        return [item_key(item) for item in self.by_category.get(category, [])]
