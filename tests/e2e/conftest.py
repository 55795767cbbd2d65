from collections.abc import AsyncIterator

import pytest_asyncio

from src.orchestrators.discover import DiscoverAggregator


@pytest_asyncio.fixture
async def aggregator() -> AsyncIterator[DiscoverAggregator]:
    """Real aggregator over configured backends, for e2e/integration suites only."""
    instance = DiscoverAggregator(debounce_seconds=0)
    try:
        yield instance
    finally:
        await instance.aclose()
