"""Shared typed constants for discover dispatch control flow."""

from enum import StrEnum


class DispatchState(StrEnum):
    """Lifecycle of the latest query.

    idle -> dispatching -> (settling)* -> published | discarded | empty
    """

    IDLE = "idle"
    DISPATCHING = "dispatching"
    SETTLING = "settling"
    PUBLISHED = "published"
    DISCARDED = "discarded"
    EMPTY = "empty"


class SortOption(StrEnum):
    """Generic sort values offered by the discover filter panel."""

    NEWEST = "createdAt"
    MOST_VIEWED = "viewCount"
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


DEFAULT_OVERVIEW_LIMIT = 6
DEFAULT_PAGE_LIMIT = 20
