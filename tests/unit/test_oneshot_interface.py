from __future__ import annotations

import json

import pytest

from src.interfaces.oneshot import parse_filters, run_oneshot
from src.orchestrators.discover import DiscoverAggregator
from tests.fakes import fake_sources


@pytest.mark.asyncio
async def test_run_oneshot_prints_aggregated_json(capsys):
    sources = fake_sources()
    agg = DiscoverAggregator(sources, debounce_seconds=0)

    code = await run_oneshot("gốm", category="products", aggregator=agg)

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert list(out["by_category"]) == ["products"]
    assert out["totals"] == {"products": 3}
    assert out["partial"] is False
    assert out["pagination"]["limit"] == 20
    await agg.aclose()


@pytest.mark.asyncio
async def test_run_oneshot_rejects_empty_query(capsys):
    code = await run_oneshot("   ")
    out = capsys.readouterr().out
    assert code == 2
    assert "must not be empty" in out


@pytest.mark.asyncio
async def test_run_oneshot_flushes_traces_when_tracing_is_on(monkeypatch, capsys):
    flushed: list[bool] = []
    monkeypatch.setattr("src.interfaces.oneshot.tracing_enabled", lambda: True)
    monkeypatch.setattr("src.interfaces.oneshot.flush", lambda: flushed.append(True))
    agg = DiscoverAggregator(fake_sources(), debounce_seconds=0)

    code = await run_oneshot("gốm", aggregator=agg)

    capsys.readouterr()
    assert code == 0
    assert flushed == [True]
    await agg.aclose()


def test_parse_filters_coerces_booleans():
    assert parse_filters(["sort=createdAt", "verified=true", "min_price=100000"]) == {
        "sort": "createdAt",
        "verified": True,
        "min_price": "100000",
    }


def test_parse_filters_rejects_malformed_pairs():
    with pytest.raises(ValueError):
        parse_filters(["no-equals-sign"])
