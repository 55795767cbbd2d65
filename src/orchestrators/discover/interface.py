"""Standard interface for discover source adapters.

Every domain (artisans, users, posts, products) implements SourceAdapter.
``query`` is the failure-containment boundary: it always returns a
SourceResult and never raises.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.contracts.discover_v1 import (
    Category,
    ErrorKind,
    FilterMap,
    SearchRequest,
    SourcePage,
    SourceResult,
)
from src.orchestrators.discover.constants import SortOption
from src.orchestrators.discover.errors import (
    DiscoverError,
    InvalidSourceResponse,
    SourceError,
    SourceTimeout,
)

logger = logging.getLogger(__name__)


class SourceAdapter(ABC):
    """Base class for all discover sources."""

    category: Category
    path: str
    text_param: str = "q"
    # sort values this backend understands as a sortBy column
    sort_fields: frozenset[str] = frozenset({SortOption.NEWEST})

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    def get_source_name(self) -> str:
        return str(self.category)

    @abstractmethod
    def translate_filters(self, filters: FilterMap) -> dict[str, Any]:
        """Map the generic filter map to backend query params; drop unknown keys."""

    def build_params(self, req: SearchRequest) -> dict[str, Any]:
        params: dict[str, Any] = {
            self.text_param: req.text,
            "page": req.page,
            "limit": req.limit,
        }
        params.update(self._sort_params(req.filters))
        params.update(self.translate_filters(req.filters))
        return {k: v for k, v in params.items() if v is not None and v != ""}

    def _sort_params(self, filters: FilterMap) -> dict[str, Any]:
        sort = filters.get("sort")
        order = str(filters.get("order") or "").lower()
        out: dict[str, Any] = {}
        if isinstance(sort, str) and sort in self.sort_fields:
            out["sortBy"] = sort
        if order in ("asc", "desc") and out:
            out["sortOrder"] = order
        return out

    async def fetch(self, req: SearchRequest) -> SourcePage:
        """Issue the HTTP call and parse the platform response envelope."""
        response = await self._client.get(self.path, params=self.build_params(req))
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidSourceResponse(self.get_source_name(), "body is not JSON") from e
        return self.parse_page(payload, req)

    def parse_page(self, payload: Any, req: SearchRequest) -> SourcePage:
        source = self.get_source_name()
        if not isinstance(payload, dict):
            raise InvalidSourceResponse(source, f"expected object, got {type(payload).__name__}")
        if payload.get("success") is False:
            raise SourceError(source, str(payload.get("message") or "request failed"))

        # {success, data: {data, meta}, message} or a bare {data, meta}
        body = payload.get("data") if isinstance(payload.get("data"), dict) else payload
        items = body.get("data")
        if not isinstance(items, list):
            raise InvalidSourceResponse(source, "missing 'data' list")
        meta = body.get("meta") if isinstance(body.get("meta"), dict) else {}

        total = _as_int(meta.get("total"), default=len(items))
        limit = _as_int(meta.get("limit"), default=req.limit)
        total_pages = _as_int(meta.get("totalPages"), default=_pages(total, limit))
        return SourcePage(
            items=[item for item in items if isinstance(item, dict)],
            total=max(total, 0),
            total_pages=max(total_pages, 0),
            limit=max(limit, 0),
            page=max(_as_int(meta.get("page"), default=req.page), 1),
        )

    async def query(self, req: SearchRequest, timeout: float) -> SourceResult:
        """Run one search; every failure becomes a failed, empty result."""
        source = self.get_source_name()
        t0 = time.monotonic()

        def elapsed() -> float:
            return round((time.monotonic() - t0) * 1000, 1)

        try:
            async with asyncio.timeout(timeout):
                page = await self.fetch(req)
        except TimeoutError:
            err = SourceTimeout(source, timeout)
            logger.warning("Adapter: %s", err)
            return SourceResult.failure(self.category, err.kind, str(err), elapsed())
        except httpx.TimeoutException as e:
            err = SourceTimeout(source, timeout)
            logger.warning("Adapter: %s (%s)", err, type(e).__name__)
            return SourceResult.failure(self.category, err.kind, str(err), elapsed())
        except httpx.HTTPStatusError as e:
            err = SourceError(source, e.response.reason_phrase, e.response.status_code)
            logger.warning("Adapter: %s", err)
            return SourceResult.failure(self.category, err.kind, str(err), elapsed())
        except httpx.HTTPError as e:
            logger.warning("Adapter: transport failure for '%s': %s", source, e)
            return SourceResult.failure(
                self.category, ErrorKind.TRANSPORT_ERROR, f"{source}: {e!s}", elapsed()
            )
        except DiscoverError as e:
            logger.warning("Adapter: %s", e)
            return SourceResult.failure(self.category, e.kind, str(e), elapsed())
        except Exception as e:
            logger.error("Adapter: unexpected failure for '%s': %s", source, e, exc_info=True)
            return SourceResult.failure(
                self.category, ErrorKind.UNEXPECTED, f"{source}: {e!s}", elapsed()
            )

        logger.debug(
            "Adapter: %s page=%s returned %s/%s in %.1fms",
            source,
            req.page,
            len(page.items),
            page.total,
            elapsed(),
        )
        return SourceResult.from_page(self.category, page, elapsed())


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return (total + limit - 1) // limit
