"""Discover search contract v1: shared types for queries, source results and the aggregated read model."""

from src.contracts.discover_v1 import (
    AggregatedResultSet,
    Category,
    ErrorKind,
    FilterMap,
    Pagination,
    SearchQuery,
    SearchRequest,
    SourcePage,
    SourceResult,
)

__all__ = [
    "AggregatedResultSet",
    "Category",
    "ErrorKind",
    "FilterMap",
    "Pagination",
    "SearchQuery",
    "SearchRequest",
    "SourcePage",
    "SourceResult",
]
