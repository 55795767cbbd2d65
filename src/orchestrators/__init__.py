"""Orchestrators: concurrent multi-source pipelines (e.g. discover search)."""

from src.orchestrators.discover import (
    AggregatedResultSet,
    DiscoverAggregator,
    SourceAdapter,
)

__all__ = [
    "AggregatedResultSet",
    "DiscoverAggregator",
    "SourceAdapter",
]
