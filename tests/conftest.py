"""Pytest configuration and shared fixtures for account health tests."""

from typing import Any

import pytest

from accounthealth_mcp.core.config import HealthEngineSettings, get_settings
from accounthealth_mcp.data_providers.normalizer import normalize_snapshot
from accounthealth_mcp.models.snapshot import AccountSnapshot


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; start every test from a clean slate."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> HealthEngineSettings:
    return HealthEngineSettings(
        parallel_evaluation=False,
        rate_limit_requests=100,
        rate_limit_window_seconds=60,
    )


def make_snapshot(**collections: Any) -> AccountSnapshot:
    """Normalize the given raw collections; unspecified sources are empty."""
    return normalize_snapshot(**collections)


def campaign(
    id: str = "1",
    cost: float = 100.0,
    conversions: float = 10.0,
    value: float = 500.0,
    **extra: Any,
) -> dict[str, Any]:
    record = {
        "id": id,
        "name": f"Campaign {id}",
        "status": "ENABLED",
        "channelType": "SEARCH",
        "impressions": 1000,
        "clicks": 100,
        "cost": cost,
        "conversions": conversions,
        "conversionValue": value,
    }
    record.update(extra)
    return record


def search_term(
    term: str,
    cost: float = 10.0,
    conversions: float = 0.0,
    value: float = 0.0,
    clicks: int = 5,
    **extra: Any,
) -> dict[str, Any]:
    record = {
        "searchTerm": term,
        "impressions": clicks * 10,
        "clicks": clicks,
        "cost": cost,
        "conversions": conversions,
        "conversionValue": value,
    }
    record.update(extra)
    return record


@pytest.fixture
def healthy_collections() -> dict[str, Any]:
    """A small account that scores well in every category."""
    return {
        "campaigns": [
            campaign(
                "1",
                cost=400.0,
                conversions=40.0,
                value=2400.0,
                searchImpressionShare=0.9,
                searchLostISRank=0.05,
                searchLostISBudget=0.05,
            ),
            campaign(
                "2",
                cost=200.0,
                conversions=20.0,
                value=1200.0,
                searchImpressionShare=0.85,
                searchLostISRank=0.1,
                searchLostISBudget=0.05,
            ),
        ],
        "ad_groups": [
            {"id": "11", "campaignId": "1", "status": "ENABLED"},
            {"id": "21", "campaignId": "2", "status": "ENABLED"},
        ],
        "keywords": [
            {
                "id": f"k{i}",
                "adGroupId": "11" if i % 2 else "21",
                "text": f"keyword {i}",
                "matchType": match_type,
                "status": "ENABLED",
                "qualityScore": 8,
                "impressions": 100,
            }
            for i, match_type in enumerate(
                ["BROAD", "BROAD", "PHRASE", "PHRASE", "EXACT", "EXACT"]
            )
        ],
        "ads": [
            {"id": "a1", "adGroupId": "11", "adStrength": "EXCELLENT"},
            {"id": "a2", "adGroupId": "21", "adStrength": "EXCELLENT"},
        ],
        "negative_keywords": [
            {"text": f"neg {i}", "matchType": "PHRASE", "level": "SHARED_LIST"}
            for i in range(6)
        ],
        "search_terms": [
            search_term("brand shoes", cost=50.0, conversions=5.0, value=300.0),
            search_term("buy brand shoes", cost=40.0, conversions=4.0, value=240.0),
        ],
        "auction_insights": [
            {"domain": "You", "impressionShare": 0.9},
            {"domain": "rival.example", "overlapRate": 0.1, "outrankingShare": 0.8},
        ],
        "device_stats": [
            {"device": "MOBILE", "clicks": 100, "cost": 100.0, "conversions": 5.0,
             "conversionValue": 500.0},
            {"device": "DESKTOP", "clicks": 100, "cost": 100.0, "conversions": 5.0,
             "conversionValue": 500.0},
        ],
        "change_events": [{"id": "c1", "changeResourceType": "CAMPAIGN"}],
        "conversion_actions": [
            {
                "id": "p1",
                "name": "Purchase",
                "status": "ENABLED",
                "includeInConversionsMetric": True,
                "allConversions": 60,
            }
        ],
    }
