"""Tests for the MCP server tools and resources."""

import threading
from datetime import datetime
from unittest.mock import patch

import pytest
from conftest import search_term

from accounthealth_mcp.analyzers.ngram import mine_ngrams
from accounthealth_mcp.data_providers import MockDataProvider
from accounthealth_mcp.engine import HealthScoreEngine
from accounthealth_mcp.models.snapshot import DataSource
from accounthealth_mcp.server import (
    AccountHealthRequest,
    ErrorCode,
    NGramRequest,
    create_mcp_server,
    get_account_health,
    get_config,
    get_ngram_analysis,
    health_check,
    reset_rate_limiter_for_testing,
    resolve_date_range,
    sanitize_error_message,
    set_data_provider,
    set_rate_limiter,
    validate_customer_id,
)
from accounthealth_mcp.utils.rate_limit import RateLimiter


def call(tool):
    """The plain function behind a registered tool or resource."""
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True)
def reset_server_state():
    reset_rate_limiter_for_testing()
    set_data_provider(None)
    yield
    reset_rate_limiter_for_testing()
    set_data_provider(None)


class TestServerSetup:
    def test_create_mcp_server(self):
        server = create_mcp_server()
        assert server is not None
        assert server.name == "Account Health MCP Server"

    def test_error_code_enum(self):
        assert ErrorCode.INVALID_CUSTOMER_ID.value == "INVALID_CUSTOMER_ID"
        assert ErrorCode.RATE_LIMIT_EXCEEDED.value == "RATE_LIMIT_EXCEEDED"


class TestValidation:
    def test_customer_id_dashes_removed(self):
        assert validate_customer_id("123-456-7890") == "1234567890"

    @pytest.mark.parametrize("customer_id", ["123", "12345678901", "abc4567890"])
    def test_invalid_customer_id(self, customer_id):
        with pytest.raises(ValueError, match="Customer ID"):
            validate_customer_id(customer_id)

    def test_default_lookback(self):
        start, end = resolve_date_range(None, "2026-09-30")
        assert end == datetime(2026, 9, 30)
        assert start == datetime(2026, 8, 31)

    def test_reversed_range(self):
        with pytest.raises(ValueError, match="start_date must be before end_date"):
            resolve_date_range("2026-09-30", "2026-09-01")

    def test_sanitize_error_message(self):
        assert (
            sanitize_error_message("Customer 1234567890 not found")
            == "Customer [CUSTOMER_ID_REDACTED] not found"
        )
        assert (
            sanitize_error_message("user@example.com denied")
            == "[EMAIL_REDACTED] denied"
        )
        assert (
            sanitize_error_message("api_key=hunter2 rejected")
            == "api_key=[REDACTED] rejected"
        )
        assert "[REDACTED]" in sanitize_error_message(
            "Token abc123xyz456abc123xyz456 failed"
        )


class TestGetAccountHealth:
    @pytest.mark.asyncio
    async def test_inline_data(self, healthy_collections):
        result = await call(get_account_health)(
            AccountHealthRequest(data=healthy_collections)
        )
        assert result["status"] == "success"
        assert result["overallScore"] > 80
        assert len(result["checks"]) == 10
        assert result["healthBlock"].startswith("=== ACCOUNT HEALTH SCORE: ")
        assert result["metadata"]["customer_id"] is None
        assert result["metadata"]["record_counts"]["campaigns"] == 2

    @pytest.mark.asyncio
    async def test_inline_camel_case_sources_and_unavailable(self):
        result = await call(get_account_health)(
            AccountHealthRequest(
                data={"searchTerms": [search_term("red shoes")]},
                unavailable={"auctionInsights": "timeout"},
            )
        )
        assert result["status"] == "success"
        assert result["metadata"]["unavailable_sources"] == {
            "auction_insights": "timeout"
        }
        assert "- Auction insights: unavailable (fetch failed: timeout)" in (
            result["healthBlock"]
        )
        market = next(
            c for c in result["checks"] if c["category"] == "MARKET_COMPETITION"
        )
        assert market["lowConfidence"]

    @pytest.mark.asyncio
    async def test_customer_id_uses_sample_provider(self):
        result = await call(get_account_health)(
            AccountHealthRequest(
                customer_id="123-456-7890",
                start_date="2026-09-01",
                end_date="2026-09-30",
            )
        )
        assert result["status"] == "success"
        assert result["metadata"]["customer_id"] == "123-456-7890"
        assert result["metadata"]["unavailable_sources"] == {}
        assert len(result["searchTerms"]) == 10

    @pytest.mark.asyncio
    async def test_installed_provider_failures_lower_confidence(self):
        set_data_provider(MockDataProvider(failing_sources={DataSource.ADS}))
        result = await call(get_account_health)(
            AccountHealthRequest(customer_id="1234567890")
        )
        assert result["status"] == "success"
        assert set(result["metadata"]["unavailable_sources"]) == {"ads"}
        ads = next(c for c in result["checks"] if c["category"] == "AD_STRENGTH")
        assert ads["lowConfidence"]

    @pytest.mark.asyncio
    async def test_invalid_customer_id(self):
        result = await call(get_account_health)(
            AccountHealthRequest(customer_id="123")
        )
        assert result["status"] == "error"
        assert result["error_code"] == ErrorCode.INVALID_CUSTOMER_ID

    @pytest.mark.asyncio
    async def test_invalid_date(self):
        result = await call(get_account_health)(
            AccountHealthRequest(customer_id="1234567890", start_date="09/01/2026")
        )
        assert result["error_code"] == ErrorCode.INVALID_INPUT
        assert "YYYY-MM-DD" in result["message"]

    @pytest.mark.asyncio
    async def test_no_data_source(self):
        result = await call(get_account_health)(AccountHealthRequest())
        assert result["status"] == "error"
        assert result["error_code"] == ErrorCode.NO_DATA_SOURCE

    @pytest.mark.asyncio
    async def test_unknown_source(self):
        result = await call(get_account_health)(
            AccountHealthRequest(data={"widgets": []})
        )
        assert result["error_code"] == ErrorCode.INVALID_INPUT
        assert "Unknown data source: widgets" in result["message"]

    @pytest.mark.asyncio
    async def test_production_requires_provider(self, monkeypatch):
        monkeypatch.setenv("AH_ENVIRONMENT", "production")
        result = await call(get_account_health)(
            AccountHealthRequest(customer_id="1234567890")
        )
        assert result["error_code"] == ErrorCode.CONFIGURATION_ERROR
        assert result["details"]["retry_allowed"] is False

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        set_rate_limiter(RateLimiter(max_requests=1, window_seconds=60))
        request = AccountHealthRequest(data={"campaigns": []})
        first = await call(get_account_health)(request)
        second = await call(get_account_health)(request)
        assert first["status"] == "success"
        assert second["error_code"] == ErrorCode.RATE_LIMIT_EXCEEDED
        assert second["details"]["retry_after_seconds"] >= 1

    @pytest.mark.asyncio
    async def test_unexpected_error(self):
        with patch(
            "accounthealth_mcp.server.HealthScoreEngine.run",
            side_effect=RuntimeError("boom"),
        ):
            result = await call(get_account_health)(
                AccountHealthRequest(data={"campaigns": []})
            )
        assert result["error_code"] == ErrorCode.INTERNAL_ERROR
        assert "boom" not in result["message"]


class TestGetNgramAnalysis:
    @pytest.fixture
    def terms(self):
        return [
            search_term("free shoes", cost=3.0),
            search_term("free boots", cost=4.0),
            search_term("trail shoes", cost=10.0, conversions=2.0, value=60.0),
            search_term("trail boots", cost=10.0, conversions=1.0, value=50.0),
        ]

    @pytest.mark.asyncio
    async def test_inline_search_terms(self, terms):
        result = await call(get_ngram_analysis)(
            NGramRequest(data={"search_terms": terms})
        )
        assert result["status"] == "success"
        assert result["ngramAnalysis"]["searchTermsAnalyzed"] == 4
        assert [m["gram"] for m in result["negativeCandidates"]] == ["free"]
        assert [m["gram"] for m in result["expansionCandidates"]] == [
            "trail",
            "shoes",
            "boots",
        ]
        assert result["ngramBlock"].startswith("=== N-GRAM ANALYSIS ===")

    @pytest.mark.asyncio
    async def test_threshold_overrides(self, terms):
        result = await call(get_ngram_analysis)(
            NGramRequest(data={"search_terms": terms}, min_cost=8.0, min_roas=10.0)
        )
        assert result["negativeCandidates"] == []
        assert result["expansionCandidates"] == []

    @pytest.mark.asyncio
    async def test_existing_negatives_excluded(self, terms):
        result = await call(get_ngram_analysis)(
            NGramRequest(
                data={
                    "search_terms": terms,
                    "negativeKeywords": [{"text": "free", "matchType": "PHRASE"}],
                }
            )
        )
        assert result["negativeCandidates"] == []

    @pytest.mark.asyncio
    async def test_no_data_source(self):
        result = await call(get_ngram_analysis)(NGramRequest())
        assert result["error_code"] == ErrorCode.NO_DATA_SOURCE


class TestEventLoopOffload:
    @pytest.mark.asyncio
    async def test_health_engine_runs_off_the_event_loop(self, healthy_collections):
        threads = []
        original = HealthScoreEngine.run

        def run(self, snapshot):
            threads.append(threading.current_thread())
            return original(self, snapshot)

        with patch.object(HealthScoreEngine, "run", run):
            result = await call(get_account_health)(
                AccountHealthRequest(data=healthy_collections)
            )
        assert result["status"] == "success"
        assert len(threads) == 1
        assert threads[0] is not threading.main_thread()

    @pytest.mark.asyncio
    async def test_ngram_mining_runs_off_the_event_loop(self):
        threads = []

        def mine(terms):
            threads.append(threading.current_thread())
            return mine_ngrams(terms)

        with patch("accounthealth_mcp.server.mine_ngrams", side_effect=mine):
            result = await call(get_ngram_analysis)(
                NGramRequest(data={"search_terms": [search_term("red shoes")]})
            )
        assert result["status"] == "success"
        assert threads and threads[0] is not threading.main_thread()

    @pytest.mark.asyncio
    async def test_failed_search_term_fetch_named_in_ngram_block(self):
        set_data_provider(MockDataProvider(failing_sources={DataSource.SEARCH_TERMS}))
        result = await call(get_ngram_analysis)(
            NGramRequest(customer_id="1234567890")
        )
        assert result["status"] == "success"
        assert "search terms source unavailable (fetch failed:" in (
            result["ngramBlock"]
        )
        assert "selected period" not in result["ngramBlock"]


class TestResources:
    def test_health_check(self):
        health = call(health_check)()
        assert health["status"] == "healthy"
        assert health["data_provider_configured"] is False
        assert health["tools_available"] == [
            "get_account_health",
            "get_ngram_analysis",
        ]

    def test_health_check_with_provider(self):
        set_data_provider(MockDataProvider())
        assert call(health_check)()["data_provider_configured"] is True

    def test_get_config(self, monkeypatch):
        monkeypatch.setenv("AH_RATE_LIMIT_REQUESTS", "7")
        config = call(get_config)()
        assert config["rate_limiting"] == {
            "backend": "memory",
            "requests": 7,
            "window_seconds": 60,
        }
        assert len(config["engine"]["category_weights"]) == 10
        assert "redis_url" not in str(config)
