"""Discover dispatcher: fans one SearchQuery out to the source adapters.

Overview ("all" tab) queries every source with a small fixed limit on page 1;
a single-category query hits one source with the standard page size. The
batch runs as a background task, so ``dispatch`` returns the generation id
immediately. Publication happens only after every call in the batch has
settled, and only if no newer batch has started in the meantime.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from src.contracts.discover_v1 import (
    AggregatedResultSet,
    Category,
    ErrorKind,
    SearchQuery,
    SearchRequest,
    SourceResult,
)
from src.core.logger import logger
from src.observability import traceable
from src.orchestrators.discover.constants import (
    DEFAULT_OVERVIEW_LIMIT,
    DEFAULT_PAGE_LIMIT,
    DispatchState,
)
from src.orchestrators.discover.interface import SourceAdapter
from src.orchestrators.discover.invalidation import InvalidationController
from src.orchestrators.discover.merger import ResultMerger

Publisher = Callable[[AggregatedResultSet], None]


@dataclass(frozen=True)
class PlannedCall:
    source: Category
    request: SearchRequest


class DiscoverDispatcher:
    """Issues adapter calls concurrently and publishes current batches."""

    def __init__(
        self,
        adapters: dict[Category, SourceAdapter],
        invalidation: InvalidationController,
        merger: ResultMerger,
        publish: Publisher,
        timeout: float = 8.0,
        overview_limit: int = DEFAULT_OVERVIEW_LIMIT,
        page_limit: int = DEFAULT_PAGE_LIMIT,
    ):
        self._adapters = adapters
        self._invalidation = invalidation
        self._merger = merger
        self._publish = publish
        self._timeout = timeout
        self._overview_limit = overview_limit
        self._page_limit = page_limit
        self._tasks: dict[int, asyncio.Task[AggregatedResultSet | None]] = {}
        self._state = DispatchState.IDLE
        self._discarded = 0

    @property
    def state(self) -> DispatchState:
        """Lifecycle state of the most recent dispatch."""
        return self._state

    @property
    def discarded_count(self) -> int:
        return self._discarded

    def mark_idle(self) -> None:
        """Back to idle after a reset; in-flight batches are already stale."""
        self._state = DispatchState.IDLE

    def plan(self, query: SearchQuery) -> list[PlannedCall]:
        """Which sources to call, and with which request, for this query."""
        if query.is_overview:
            request = SearchRequest(
                text=query.text.strip(),
                filters=query.filters,
                page=1,
                limit=self._overview_limit,
            )
            return [
                PlannedCall(source=c, request=request)
                for c in Category.sources()
                if c in self._adapters
            ]
        return [
            PlannedCall(
                source=query.category,
                request=SearchRequest(
                    text=query.text.strip(),
                    filters=query.filters,
                    page=query.page,
                    limit=self._page_limit,
                ),
            )
        ]

    def dispatch(self, query: SearchQuery) -> int:
        """Start a batch for ``query`` and return its generation without waiting."""
        if query.is_blank:
            # still opens a batch so in-flight searches for older text go stale
            generation = self._invalidation.begin_batch(query)
            self._invalidation.complete(generation)
            self._state = DispatchState.EMPTY
            logger.empty_query(generation)
            self._publish(AggregatedResultSet.empty(generation, query))
            return generation

        calls = self.plan(query)
        generation = self._invalidation.begin_batch(query, [c.source for c in calls])
        self._state = DispatchState.DISPATCHING
        logger.search_dispatch(
            generation,
            query.text,
            str(query.category),
            query.page,
            [str(c.source) for c in calls],
            calls[0].request.limit if calls else 0,
        )
        task = asyncio.get_running_loop().create_task(
            self._run_batch(generation, query, calls),
            name=f"discover-batch-{generation}",
        )
        self._tasks[generation] = task
        task.add_done_callback(lambda _: self._tasks.pop(generation, None))
        return generation

    @traceable(name="discover_batch", run_type="chain")
    async def _run_batch(
        self,
        generation: int,
        query: SearchQuery,
        calls: list[PlannedCall],
    ) -> AggregatedResultSet | None:
        logger.set_generation(generation)
        settled = await asyncio.gather(
            *(self._call(generation, call) for call in calls),
            return_exceptions=True,
        )

        results: list[SourceResult] = []
        for call, outcome in zip(calls, settled):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.error(
                    "Source '%s' escaped its adapter boundary: %s",
                    call.source,
                    outcome,
                )
                outcome = SourceResult.failure(
                    call.source, ErrorKind.UNEXPECTED, f"{call.source}: {outcome!s}"
                )
            results.append(outcome)

        merged = self._merger.merge(generation, query, results)
        if merged is None:
            self._discarded += 1
            logger.batch_discarded(generation, self._invalidation.current_generation)
            return None

        self._invalidation.complete(generation)
        self._state = DispatchState.PUBLISHED
        logger.batch_published(
            generation,
            {str(c): n for c, n in merged.totals.items()},
            merged.partial,
        )
        self._publish(merged)
        return merged

    async def _call(self, generation: int, call: PlannedCall) -> SourceResult:
        adapter = self._adapters.get(call.source)
        if adapter is None:
            result = SourceResult.failure(
                call.source, ErrorKind.UNEXPECTED, f"no adapter for '{call.source}'"
            )
        else:
            result = await adapter.query(call.request, self._timeout)
        self._invalidation.settle(generation, call.source)
        if self._invalidation.is_current(generation):
            self._state = DispatchState.SETTLING
        logger.source_result(
            generation,
            str(call.source),
            len(result.items),
            result.total,
            result.elapsed_ms,
            failed=result.failed,
            error_kind=str(result.error_kind) if result.error_kind else None,
            error=result.error,
        )
        return result

    async def wait(self, generation: int) -> AggregatedResultSet | None:
        """Await one batch. None if it was discarded or already finished."""
        task = self._tasks.get(generation)
        if task is None:
            return None
        return await task

    async def drain(self) -> None:
        """Await every outstanding batch, including ones that will be discarded."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def aclose(self) -> None:
        await self.drain()
