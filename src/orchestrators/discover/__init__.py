"""Discover search: federated overview/drill-down search with stale-batch discard."""

from src.contracts.discover_v1 import AggregatedResultSet, Category, SearchQuery
from src.orchestrators.discover.aggregator import DiscoverAggregator
from src.orchestrators.discover.interface import SourceAdapter

__all__ = [
    "AggregatedResultSet",
    "Category",
    "DiscoverAggregator",
    "SearchQuery",
    "SourceAdapter",
]
