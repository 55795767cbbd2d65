import pytest
from pydantic import ValidationError

from src.contracts.discover_v1 import (
    AggregatedResultSet,
    Category,
    ErrorKind,
    SearchQuery,
    SourceResult,
    item_key,
)


def test_search_query_defaults_are_overview_page_one():
    query = SearchQuery()
    assert query.text == ""
    assert query.category == Category.ALL
    assert query.filters == {}
    assert query.page == 1
    assert query.is_blank
    assert query.is_overview


def test_search_query_rejects_page_below_one():
    with pytest.raises(ValidationError):
        SearchQuery(text="gốm", page=0)


def test_search_query_is_immutable():
    query = SearchQuery(text="gốm")
    with pytest.raises(ValidationError):
        query.text = "thêu"


def test_filters_are_read_only_and_dump_as_plain_dict():
    query = SearchQuery(text="gốm", filters={"sort": "createdAt"})
    with pytest.raises(TypeError):
        query.filters["sort"] = "viewCount"
    assert query.model_dump()["filters"] == {"sort": "createdAt"}
    assert type(query.model_dump(mode="json")["filters"]) is dict
    with pytest.raises(TypeError):
        SearchQuery().filters["sort"] = "viewCount"


@pytest.mark.parametrize(
    "change",
    [
        {"text": "thêu"},
        {"category": Category.PRODUCTS},
        {"filters": {"sort": "createdAt"}},
    ],
)
def test_changing_intent_resets_page(change):
    query = SearchQuery(text="gốm", page=5)
    assert query.with_changes(**change).page == 1


def test_page_change_alone_keeps_intent():
    query = SearchQuery(text="gốm", category=Category.POSTS)
    moved = query.with_changes(page=3)
    assert moved.page == 3
    assert moved.text == "gốm"
    assert moved.category == Category.POSTS


def test_unchanged_intent_keeps_page():
    query = SearchQuery(text="gốm", page=4)
    assert query.with_changes(text="gốm").page == 4


def test_category_parse_is_lenient():
    assert Category.parse("Products") == Category.PRODUCTS
    assert Category.parse("nonsense") == Category.ALL
    assert Category.parse(None) == Category.ALL
    assert Category.parse("bogus", default=Category.POSTS) == Category.POSTS


def test_failed_source_result_must_be_empty():
    with pytest.raises(ValidationError):
        SourceResult(
            source=Category.POSTS,
            items=[{"id": "p1"}],
            total=1,
            failed=True,
            error_kind=ErrorKind.TIMEOUT,
        )


def test_source_result_rejects_overview_category():
    with pytest.raises(ValidationError):
        SourceResult(source=Category.ALL)


def test_failure_constructor_produces_empty_result():
    result = SourceResult.failure(Category.PRODUCTS, ErrorKind.TIMEOUT, "slow")
    assert result.failed
    assert result.items == []
    assert result.total == 0
    assert result.error_kind == ErrorKind.TIMEOUT


def test_item_key_prefers_id_then_mongo_id_then_slug():
    assert item_key({"id": 7, "_id": "x"}) == "7"
    assert item_key({"_id": "abc"}) == "abc"
    assert item_key({"slug": "binh-gom"}) == "binh-gom"
    assert item_key({"name": "no key"}) == ""


def test_empty_result_set_has_every_category_and_nothing_in_it():
    empty = AggregatedResultSet.empty(generation=3)
    assert set(empty.by_category) == set(Category.sources())
    assert all(v == 0 for v in empty.totals.values())
    assert empty.generation == 3
    assert empty.is_empty
    assert not empty.has_results
    assert not empty.partial


def test_result_set_counts():
    result = AggregatedResultSet(
        by_category={Category.ARTISANS: [{"id": "a"}], Category.USERS: []},
        totals={Category.ARTISANS: 3, Category.USERS: 42},
    )
    assert result.has_results
    assert result.total_results == 45
    assert result.keys_for(Category.ARTISANS) == ["a"]
    assert result.keys_for(Category.PRODUCTS) == []
