"""One-shot interface: run a single discover search, print JSON, exit."""

from __future__ import annotations

import asyncio
import json
from typing import Any

from src.contracts.discover_v1 import Category
from src.core.config import config
from src.observability import flush, tracing_enabled
from src.orchestrators.discover import DiscoverAggregator


def parse_filters(pairs: list[str]) -> dict[str, Any]:
    """``["sort=createdAt", "verified=true"]`` -> ``{"sort": "createdAt", "verified": True}``."""
    filters: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"filter must look like key=value: {pair!r}")
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            filters[key.strip()] = lowered == "true"
        else:
            filters[key.strip()] = value.strip()
    return filters


async def run_oneshot(
    text: str,
    category: str = "all",
    page: int = 1,
    filters: dict[str, Any] | None = None,
    aggregator: DiscoverAggregator | None = None,
) -> int:
    query = (text or "").strip()
    if not query:
        print("Error: query must not be empty")
        return 2

    errors = config.validate()
    if errors:
        for err in errors:
            print(f"Error: {err}")
        return 2

    owned = aggregator is None
    agg = aggregator or DiscoverAggregator()
    try:
        agg.search(query, Category.parse(category), filters or {}, max(page, 1))
        result = await agg.wait()
        print(
            json.dumps(
                result.model_dump(mode="json"),
                ensure_ascii=False,
                indent=2,
            )
        )
        return 0
    finally:
        if owned:
            await agg.aclose()
        if tracing_enabled():
            flush()


def main(
    text: str,
    category: str = "all",
    page: int = 1,
    filters: dict[str, Any] | None = None,
) -> int:
    return asyncio.run(run_oneshot(text, category=category, page=page, filters=filters))
