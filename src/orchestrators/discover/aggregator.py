"""Discover aggregator: the inbound surface of federated discovery search.

Wires query state, dispatcher, merger and invalidation together:

  1. A query change (typing, tab switch, filters, page) updates QueryState
  2. QueryState notifies, the dispatcher starts a new generation
  3. Source adapters run concurrently; failures become failed results
  4. The merger publishes only if the generation is still current
  5. Subscribers receive the new immutable AggregatedResultSet
"""

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from src.contracts.discover_v1 import AggregatedResultSet, Category, SearchQuery
from src.core.config import config
from src.core.logger import logger
from src.orchestrators.discover.backends import build_adapters
from src.orchestrators.discover.constants import DispatchState
from src.orchestrators.discover.dispatcher import DiscoverDispatcher
from src.orchestrators.discover.interface import SourceAdapter
from src.orchestrators.discover.invalidation import InvalidationController
from src.orchestrators.discover.merger import ResultMerger
from src.orchestrators.discover.query_state import QueryState

Subscriber = Callable[[AggregatedResultSet], None]


class DiscoverAggregator:
    """Federated search over artisans, users, posts and products."""

    def __init__(
        self,
        adapters: dict[Category, SourceAdapter] | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        overview_limit: int | None = None,
        page_limit: int | None = None,
        debounce_seconds: float | None = None,
    ):
        self._timeout = timeout if timeout is not None else config.source_timeout_seconds
        overview_limit = overview_limit or config.overview_limit
        page_limit = page_limit or config.page_limit
        self._debounce = (
            debounce_seconds if debounce_seconds is not None else config.debounce_seconds
        )

        self._client: httpx.AsyncClient | None = None
        if adapters is None:
            if client is None:
                client = httpx.AsyncClient(
                    base_url=config.api_base_url,
                    timeout=self._timeout,
                    follow_redirects=True,
                )
                self._client = client
            adapters = build_adapters(client)

        self._invalidation = InvalidationController()
        self._query_state = QueryState(self._invalidation)
        self._merger = ResultMerger(
            self._invalidation,
            overview_limit=overview_limit,
            page_limit=page_limit,
        )
        self._dispatcher = DiscoverDispatcher(
            adapters,
            self._invalidation,
            self._merger,
            self._on_published,
            timeout=self._timeout,
            overview_limit=overview_limit,
            page_limit=page_limit,
        )
        self._result = AggregatedResultSet.empty()
        self._subscribers: list[Subscriber] = []
        self._typing_task: asyncio.Task[None] | None = None
        self._muted = False
        self._query_state.on_change(self._on_query_change)

    async def __aenter__(self) -> "DiscoverAggregator":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # -- read side ---------------------------------------------------------

    @property
    def query_state(self) -> QueryState:
        """Setters on the returned state re-dispatch automatically."""
        return self._query_state

    @property
    def query(self) -> SearchQuery:
        return self._query_state.snapshot

    @property
    def result(self) -> AggregatedResultSet:
        return self._result

    @property
    def loading(self) -> bool:
        return self._query_state.loading

    @property
    def dispatch_state(self) -> DispatchState:
        return self._dispatcher.state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -- inbound operations -----------------------------------------------

    def search(
        self,
        text: str,
        category: Category | str = Category.ALL,
        filters: dict[str, Any] | None = None,
        page: int = 1,
    ) -> int:
        """Replace the whole query and dispatch it, even if it is unchanged."""
        self._cancel_typing()
        with self._quiet():
            self._query_state.update(
                text=text or "",
                category=category,
                filters=filters,
                page=page,
            )
        return self._dispatch(self._query_state.snapshot)

    def view_more(self, category: Category | str) -> int:
        """Drill into one category from the overview, starting at page 1."""
        category = Category(category)
        if category == Category.ALL:
            raise ValueError("view_more needs a source category, not 'all'")
        with self._quiet():
            self._query_state.update(category=category, page=1)
        return self._dispatch(self._query_state.snapshot)

    def type_text(self, text: str) -> None:
        """Debounced text input: only the last call within the window dispatches."""
        self._cancel_typing()
        if self._debounce <= 0:
            self._query_state.set_text(text)
            return
        self._typing_task = asyncio.get_running_loop().create_task(
            self._apply_typed(text), name="discover-typing"
        )

    def seed_from_url(self, query_string: str) -> SearchQuery:
        """Initialise from ``?q=...&type=...`` and dispatch the seeded query."""
        with self._quiet():
            seeded = self._query_state.seed_from_url(query_string)
        self._dispatch(seeded)
        return seeded

    def reset(self) -> None:
        self._cancel_typing()
        with self._quiet():
            self._query_state.reset()
        self._dispatcher.mark_idle()
        self._result = AggregatedResultSet.empty(
            self._invalidation.current_generation, self._query_state.snapshot
        )
        self._notify(self._result)

    async def wait(self) -> AggregatedResultSet:
        """Let pending typing and every in-flight batch settle; return the latest result."""
        while self._typing_task is not None and not self._typing_task.done():
            await asyncio.wait([self._typing_task])
        await self._dispatcher.drain()
        return self._result

    async def aclose(self) -> None:
        self._cancel_typing()
        await self._dispatcher.aclose()
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # -- internals ---------------------------------------------------------

    def _dispatch(self, query: SearchQuery) -> int:
        self._query_state.set_loading(not query.is_blank)
        return self._dispatcher.dispatch(query)

    def _on_query_change(self, query: SearchQuery) -> None:
        if not self._muted:
            self._dispatch(query)

    def _on_published(self, result: AggregatedResultSet) -> None:
        self._result = result
        self._query_state.set_loading(False)
        self._notify(result)

    def _notify(self, result: AggregatedResultSet) -> None:
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception as e:
                logger.error("Discover subscriber failed: %s", e, exception=e)

    async def _apply_typed(self, text: str) -> None:
        await asyncio.sleep(self._debounce)
        self._typing_task = None
        self._query_state.set_text(text)

    def _cancel_typing(self) -> None:
        if self._typing_task is not None and not self._typing_task.done():
            self._typing_task.cancel()
        self._typing_task = None

    @contextmanager
    def _quiet(self) -> Iterator[None]:
        """Suppress auto-dispatch while several fields change at once."""
        self._muted = True
        try:
            yield
        finally:
            self._muted = False
