"""Result merger: turns one batch of SourceResults into an AggregatedResultSet.

Merging is all-or-nothing. A stale batch yields None; a current batch yields a
brand new snapshot that replaces the previous one wholesale.
"""

from src.contracts.discover_v1 import (
    AggregatedResultSet,
    Category,
    Pagination,
    SearchQuery,
    SourceResult,
)
from src.core.logger import logger
from src.orchestrators.discover.constants import (
    DEFAULT_OVERVIEW_LIMIT,
    DEFAULT_PAGE_LIMIT,
)
from src.orchestrators.discover.invalidation import InvalidationController


class ResultMerger:
    def __init__(
        self,
        invalidation: InvalidationController,
        overview_limit: int = DEFAULT_OVERVIEW_LIMIT,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ) -> None:
        self._invalidation = invalidation
        self._overview_limit = overview_limit
        self._page_limit = page_limit

    def merge(
        self,
        generation: int,
        query: SearchQuery,
        results: list[SourceResult],
    ) -> AggregatedResultSet | None:
        """Build the published set, or None when the batch has been superseded."""
        if not self._invalidation.is_current(generation):
            logger.debug(
                "Merger: dropping stale batch #%s (current #%s)",
                generation,
                self._invalidation.current_generation,
            )
            return None

        if query.is_overview:
            return self._merge_overview(generation, query, results)
        return self._merge_single(generation, query, results)

    def _merge_overview(
        self, generation: int, query: SearchQuery, results: list[SourceResult]
    ) -> AggregatedResultSet:
        by_source = {r.source: r for r in results}
        by_category: dict[Category, list] = {}
        totals: dict[Category, int] = {}
        failed: list[Category] = []
        for category in Category.sources():
            result = by_source.get(category)
            if result is None:
                continue
            # a backend that ignores limit must not widen the overview slice
            by_category[category] = list(result.items[: self._overview_limit])
            totals[category] = result.total
            if result.failed:
                failed.append(category)
        return AggregatedResultSet(
            by_category=by_category,
            totals=totals,
            generation=generation,
            partial=bool(failed),
            query=query,
            failed_sources=failed,
        )

    def _merge_single(
        self, generation: int, query: SearchQuery, results: list[SourceResult]
    ) -> AggregatedResultSet:
        result = next((r for r in results if r.source == query.category), None)
        if result is None:
            result = SourceResult(source=query.category)
            logger.warning(
                "Merger: batch #%s has no result for '%s'", generation, query.category
            )
        return AggregatedResultSet(
            by_category={query.category: list(result.items)},
            totals={query.category: result.total},
            generation=generation,
            partial=result.failed,
            query=query,
            pagination=Pagination(
                total=result.total,
                total_pages=result.total_pages,
                limit=result.limit or self._page_limit,
                page=query.page,
            ),
            failed_sources=[query.category] if result.failed else [],
        )
