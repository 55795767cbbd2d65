"""Query state: the single writer of the current SearchQuery.

Readers get immutable snapshots; listeners are notified synchronously after
every effective change so the aggregator can re-dispatch.
"""

from collections.abc import Callable
from typing import Any

from src.contracts.discover_v1 import Category, SearchQuery
from src.orchestrators.discover.invalidation import InvalidationController
from src.orchestrators.discover.url_state import parse_query_string

QueryListener = Callable[[SearchQuery], None]


class QueryState:
    def __init__(self, invalidation: InvalidationController) -> None:
        self._invalidation = invalidation
        self._query = SearchQuery()
        self._loading = False
        self._listeners: list[QueryListener] = []

    @property
    def snapshot(self) -> SearchQuery:
        return self._query

    @property
    def loading(self) -> bool:
        return self._loading

    def on_change(self, listener: QueryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def set_text(self, text: str) -> SearchQuery:
        return self._apply(text=text or "")

    def set_category(self, category: Category | str) -> SearchQuery:
        return self._apply(category=Category(category))

    def set_filters(self, filters: dict[str, Any] | None) -> SearchQuery:
        return self._apply(filters=dict(filters or {}))

    def set_page(self, page: int) -> SearchQuery:
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        return self._apply(page=page)

    def set_loading(self, loading: bool) -> None:
        self._loading = loading

    def update(self, **changes: Any) -> SearchQuery:
        """Apply several changes with a single notification."""
        if "category" in changes:
            changes["category"] = Category(changes["category"])
        if "filters" in changes:
            changes["filters"] = dict(changes["filters"] or {})
        if "page" in changes and changes["page"] < 1:
            raise ValueError(f"page must be >= 1, got {changes['page']}")
        return self._apply(**changes)

    def seed_from_url(self, query_string: str) -> SearchQuery:
        """Replace the query with exactly what the URL carries; filters are not in the URL."""
        seeded = parse_query_string(query_string)
        return self._apply(
            text=seeded.text, category=seeded.category, filters={}, page=seeded.page
        )

    def reset(self) -> SearchQuery:
        self._invalidation.invalidate()
        self._loading = False
        changed = self._query != SearchQuery()
        self._query = SearchQuery()
        if changed:
            self._notify()
        return self._query

    def _apply(self, **changes: Any) -> SearchQuery:
        updated = self._query.with_changes(**changes)
        if updated == self._query:
            return self._query
        self._query = updated
        self._notify()
        return updated

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._query)
