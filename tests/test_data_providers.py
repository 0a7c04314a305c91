"""Tests for data providers and concurrent snapshot collection."""

from datetime import datetime

import pytest

from accounthealth_mcp.core.exceptions import DataError
from accounthealth_mcp.data_providers import MockDataProvider, collect_snapshot
from accounthealth_mcp.models.keyword import MatchType, NegativeLevel
from accounthealth_mcp.models.snapshot import DataSource, SourceState

START = datetime(2026, 9, 1)
END = datetime(2026, 9, 30)


class TestMockDataProvider:
    @pytest.mark.asyncio
    async def test_same_seed_same_data(self):
        first = await MockDataProvider(seed=7).get_campaigns("1234567890", START, END)
        second = await MockDataProvider(seed=7).get_campaigns("1234567890", START, END)
        assert first == second

    @pytest.mark.asyncio
    async def test_failing_source_raises(self):
        provider = MockDataProvider(failing_sources={DataSource.KEYWORDS})
        with pytest.raises(DataError):
            await provider.get_keywords("1234567890", START, END)

    @pytest.mark.asyncio
    async def test_empty_source_returns_nothing(self):
        provider = MockDataProvider(empty_sources={DataSource.ADS})
        assert await provider.get_ads("1234567890", START, END) == []

    @pytest.mark.asyncio
    async def test_change_events_span_period(self):
        events = await MockDataProvider().get_change_events("1234567890", START, END)
        assert len(events) == 10
        assert events[0]["changeDateTime"].startswith("2026-09-01")


class TestCollectSnapshot:
    @pytest.mark.asyncio
    async def test_collects_every_source(self):
        snapshot = await collect_snapshot(MockDataProvider(), "1234567890", START, END)
        assert snapshot.unavailable == {}
        assert all(
            snapshot.source_state(source) == SourceState.AVAILABLE
            for source in DataSource
        )
        assert len(snapshot.campaigns) == 4
        assert len(snapshot.search_terms) == 10

    @pytest.mark.asyncio
    async def test_records_are_normalized(self):
        snapshot = await collect_snapshot(MockDataProvider(), "1234567890", START, END)
        cheap = next(k for k in snapshot.keywords if k.id == "3008")
        assert cheap.match_type == MatchType.BROAD
        assert cheap.quality_score is None
        shared = next(n for n in snapshot.negative_keywords if n.id == "5003")
        assert shared.level == NegativeLevel.SHARED_LIST
        sale = next(c for c in snapshot.campaigns if c.id == "1003")
        assert sale.search_impression_share == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_failures_are_isolated_per_source(self):
        provider = MockDataProvider(
            failing_sources={DataSource.AUCTION_INSIGHTS, DataSource.ADS}
        )
        snapshot = await collect_snapshot(provider, "1234567890", START, END)
        assert set(snapshot.unavailable) == {"auction_insights", "ads"}
        assert "Simulated ads fetch failure" in snapshot.unavailable["ads"]
        assert snapshot.source_state(DataSource.CAMPAIGNS) == SourceState.AVAILABLE

    @pytest.mark.asyncio
    async def test_empty_sources_are_not_unavailable(self):
        provider = MockDataProvider(empty_sources={DataSource.SEARCH_TERMS})
        snapshot = await collect_snapshot(provider, "1234567890", START, END)
        assert snapshot.source_state(DataSource.SEARCH_TERMS) == SourceState.EMPTY
        assert "search_terms" not in snapshot.unavailable
