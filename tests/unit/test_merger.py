import json

import pytest

from src.contracts.discover_v1 import Category, ErrorKind, SearchQuery, SourceResult
from src.core.logger import logger
from src.orchestrators.discover.invalidation import InvalidationController
from src.orchestrators.discover.merger import ResultMerger
from tests.fakes import items_named


@pytest.fixture
def ctrl() -> InvalidationController:
    return InvalidationController()


@pytest.fixture
def merger(ctrl) -> ResultMerger:
    return ResultMerger(ctrl, overview_limit=6, page_limit=20)


def _ok(category: Category, count: int, total: int | None = None) -> SourceResult:
    return SourceResult(
        source=category,
        items=items_named(category, count),
        total=count if total is None else total,
        total_pages=1,
        limit=6,
    )


def test_overview_scenario_with_one_timeout(ctrl, merger):
    query = SearchQuery(text="gốm")
    generation = ctrl.begin_batch(query, Category.sources())
    results = [
        _ok(Category.ARTISANS, 3),
        _ok(Category.USERS, 6, total=42),
        _ok(Category.POSTS, 0),
        SourceResult.failure(Category.PRODUCTS, ErrorKind.TIMEOUT, "products: slow"),
    ]

    merged = merger.merge(generation, query, results)

    assert merged is not None
    assert {c: len(v) for c, v in merged.by_category.items()} == {
        Category.ARTISANS: 3,
        Category.USERS: 6,
        Category.POSTS: 0,
        Category.PRODUCTS: 0,
    }
    assert merged.totals == {
        Category.ARTISANS: 3,
        Category.USERS: 42,
        Category.POSTS: 0,
        Category.PRODUCTS: 0,
    }
    assert merged.partial is True
    assert merged.failed_sources == [Category.PRODUCTS]
    assert merged.pagination is None
    assert merged.generation == generation


def test_overview_caps_items_even_if_backend_ignores_limit(ctrl, merger):
    query = SearchQuery(text="gốm")
    generation = ctrl.begin_batch(query)
    results = [_ok(c, 15, total=300) for c in Category.sources()]

    merged = merger.merge(generation, query, results)

    assert all(len(items) == 6 for items in merged.by_category.values())
    assert all(total == 300 for total in merged.totals.values())
    assert merged.partial is False


def test_single_category_exposes_only_that_category_with_pagination(ctrl, merger):
    query = SearchQuery(text="gốm", category=Category.PRODUCTS, page=2)
    generation = ctrl.begin_batch(query, [Category.PRODUCTS])
    result = SourceResult(
        source=Category.PRODUCTS,
        items=items_named(Category.PRODUCTS, 20),
        total=57,
        total_pages=3,
        limit=20,
        page=2,
    )

    merged = merger.merge(generation, query, [result])

    assert list(merged.by_category) == [Category.PRODUCTS]
    assert list(merged.totals) == [Category.PRODUCTS]
    assert Category.USERS not in merged.by_category
    assert merged.pagination.total == 57
    assert merged.pagination.total_pages == 3
    assert merged.pagination.page == 2
    assert merged.pagination.limit == 20


def test_single_category_failure_is_partial_and_keeps_page_size(ctrl, merger):
    query = SearchQuery(text="gốm", category=Category.POSTS)
    generation = ctrl.begin_batch(query)
    failed = SourceResult.failure(Category.POSTS, ErrorKind.HTTP_ERROR, "posts: HTTP 502")

    merged = merger.merge(generation, query, [failed])

    assert merged.partial is True
    assert merged.by_category == {Category.POSTS: []}
    assert merged.pagination.limit == 20


def test_stale_generation_is_discarded(ctrl, merger):
    old_query = SearchQuery(text="gốm")
    stale = ctrl.begin_batch(old_query)
    ctrl.begin_batch(SearchQuery(text="thêu"))

    assert merger.merge(stale, old_query, [_ok(c, 2) for c in Category.sources()]) is None


def test_all_sources_failing_still_publishes(ctrl, merger):
    query = SearchQuery(text="gốm")
    generation = ctrl.begin_batch(query)
    results = [SourceResult.failure(c, ErrorKind.TRANSPORT_ERROR) for c in Category.sources()]

    merged = merger.merge(generation, query, results)

    assert merged is not None
    assert merged.partial is True
    assert merged.is_empty
    assert set(merged.failed_sources) == set(Category.sources())


def test_each_merge_builds_a_new_snapshot(ctrl, merger):
    query = SearchQuery(text="gốm")
    g1 = ctrl.begin_batch(query)
    first = merger.merge(g1, query, [_ok(c, 2) for c in Category.sources()])
    g2 = ctrl.begin_batch(query)
    second = merger.merge(g2, query, [_ok(c, 1) for c in Category.sources()])

    assert first is not second
    assert all(len(v) == 2 for v in first.by_category.values())
    assert all(len(v) == 1 for v in second.by_category.values())


def test_missing_single_category_result_is_recorded_as_warning(ctrl, merger):
    query = SearchQuery(text="gốm", category=Category.POSTS)
    generation = ctrl.begin_batch(query)

    merged = merger.merge(generation, query, [])

    assert merged.by_category == {Category.POSTS: []}
    last = json.loads(logger.log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert last["event_type"] == "WARNING"
    assert f"batch #{generation} has no result for 'posts'" in last["data"]["message"]
