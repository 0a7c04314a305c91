"""Tests for normalized entity and report models."""

import math

import pytest

from accounthealth_mcp.models.ad import Ad, AdStrength
from accounthealth_mcp.models.asset import (
    ApprovalStatus,
    AssetPerformance,
    AssetPerformanceLabel,
)
from accounthealth_mcp.models.auction_insight import AuctionInsightRow
from accounthealth_mcp.models.base import EntityStatus
from accounthealth_mcp.models.campaign import Campaign, ChannelType
from accounthealth_mcp.models.conversion_action import ConversionAction
from accounthealth_mcp.models.device import DeviceStat, DeviceType
from accounthealth_mcp.models.health import (
    HealthCategory,
    HealthCheck,
    HealthStatus,
    grade_for_score,
    status_for_score,
)
from accounthealth_mcp.models.keyword import (
    Keyword,
    MatchType,
    NegativeKeyword,
    NegativeLevel,
)
from accounthealth_mcp.models.search_term import SearchTerm


class TestCampaign:
    def test_camel_case_record(self):
        c = Campaign.model_validate(
            {
                "id": 1001,
                "name": "Brand",
                "status": 2,
                "channelType": 2,
                "searchImpressionShare": "45%",
                "searchLostISBudget": "< 10%",
                "cost": "$1,000.00",
                "conversionValue": "3,000",
            }
        )
        assert c.id == "1001"
        assert c.status == EntityStatus.ENABLED
        assert c.channel_type == ChannelType.SEARCH
        assert c.search_impression_share == pytest.approx(0.45)
        assert c.search_lost_is_budget == pytest.approx(0.1)
        assert c.search_lost_is_rank is None
        assert c.cost == 1000.0
        assert c.roas == pytest.approx(3.0)

    def test_float_ids_lose_trailing_zero(self):
        assert Campaign.model_validate({"id": 1001.0}).id == "1001"

    def test_channel_aliases(self):
        assert Campaign(channel_type="pmax").channel_type == ChannelType.PERFORMANCE_MAX
        assert Campaign(channel_type="???").channel_type == ChannelType.UNKNOWN

    def test_derived_rates_are_zero_guarded(self):
        c = Campaign(cost=0, clicks=0, impressions=0, conversions=0)
        assert (c.ctr, c.cpc, c.cpa, c.roas, c.conversion_rate) == (0, 0, 0, 0, 0)

    def test_invalid_metrics_default_to_zero(self):
        c = Campaign.model_validate(
            {"impressions": "N/A", "cost": math.nan, "clicks": None}
        )
        assert c.impressions == 0
        assert c.cost == 0.0
        assert c.clicks == 0

    def test_paused_campaign_active_only_with_impressions(self):
        assert not Campaign(status="PAUSED").is_active
        assert Campaign(status="PAUSED", impressions=10).is_active
        assert Campaign(status="garbled").is_active

    def test_serializes_camel_case(self):
        dumped = Campaign(id="1", search_lost_is_budget=0.2).model_dump(by_alias=True)
        assert dumped["searchLostISBudget"] == 0.2
        assert "conversionValue" in dumped


class TestKeyword:
    def test_quality_score_range(self):
        assert Keyword(quality_score="7").quality_score == 7
        assert Keyword(quality_score=11).quality_score is None
        assert Keyword(quality_score=0).quality_score is None
        assert Keyword(quality_score="--").quality_score is None

    def test_text_aliases(self):
        kw = Keyword.model_validate({"keywordText": " running shoes "})
        assert kw.text == "running shoes"

    def test_match_type_suffix(self):
        assert Keyword(match_type="BROAD_MATCH").match_type == MatchType.BROAD


class TestNegativeKeyword:
    def test_level_inferred_from_ids(self):
        assert NegativeKeyword(ad_group_id="1").level == NegativeLevel.AD_GROUP
        assert NegativeKeyword(campaign_id="1").level == NegativeLevel.CAMPAIGN
        assert NegativeKeyword(text="x").level == NegativeLevel.UNKNOWN

    def test_explicit_level_kept(self):
        negative = NegativeKeyword(campaign_id="1", level="SHARED_LIST")
        assert negative.level == NegativeLevel.SHARED_LIST

    def test_exact_blocks_identical_query_only(self):
        negative = NegativeKeyword(text="red shoes", match_type="EXACT")
        assert negative.blocks("Red  Shoes")
        assert not negative.blocks("red shoes sale")

    def test_phrase_blocks_contiguous_sequence(self):
        negative = NegativeKeyword(text="red shoes", match_type="PHRASE")
        assert negative.blocks("cheap red shoes sale")
        assert not negative.blocks("shoes red")
        assert not negative.blocks("red running shoes")

    def test_broad_blocks_any_order(self):
        negative = NegativeKeyword(text="red shoes", match_type="BROAD")
        assert negative.blocks("shoes that are red")
        assert not negative.blocks("red hat")

    def test_empty_text_blocks_nothing(self):
        assert not NegativeKeyword(text="", match_type="BROAD").blocks("anything")


class TestOtherEntities:
    def test_ad_counts_accept_lists(self):
        ad = Ad.model_validate(
            {"headlines": ["a", "b", "c"], "descriptionsCount": "2", "adStrength": 7}
        )
        assert ad.headlines_count == 3
        assert ad.descriptions_count == 2
        assert ad.ad_strength == AdStrength.EXCELLENT
        assert ad.is_rated

    def test_pending_ad_strength_is_unrated(self):
        assert not Ad(ad_strength="PENDING").is_rated

    def test_asset_labels(self):
        asset = AssetPerformance.model_validate(
            {"performanceLabel": "LOW", "approvalStatus": "DISAPPROVED"}
        )
        assert asset.performance_label == AssetPerformanceLabel.POOR
        assert asset.approval_status == ApprovalStatus.DISAPPROVED

    def test_own_row_is_not_a_competitor(self):
        assert not AuctionInsightRow(competitor="You").is_competitor
        assert AuctionInsightRow(competitor="rival.example").is_competitor

    def test_device_ui_spellings(self):
        assert DeviceStat(device="Mobile phones").device == DeviceType.MOBILE
        assert DeviceStat(device="Computers").device == DeviceType.DESKTOP
        assert DeviceStat(device=4).device == DeviceType.DESKTOP

    def test_primary_conversion_action(self):
        primary = ConversionAction(
            status="ENABLED", include_in_conversions_metric="true"
        )
        assert primary.is_primary
        assert not ConversionAction(
            status="PAUSED", include_in_conversions_metric=True
        ).is_primary

    def test_search_term_aliases(self):
        term = SearchTerm.model_validate({"query": "  Red Shoes ", "cost": "1.5"})
        assert term.search_term == "Red Shoes"
        assert term.cost == 1.5


class TestHealthModels:
    @pytest.mark.parametrize(
        "score,status",
        [
            (100, HealthStatus.EXCELLENT),
            (80.01, HealthStatus.EXCELLENT),
            (80, HealthStatus.GOOD),
            (60.01, HealthStatus.GOOD),
            (60, HealthStatus.WARNING),
            (40.01, HealthStatus.WARNING),
            (40, HealthStatus.CRITICAL),
            (0, HealthStatus.CRITICAL),
        ],
    )
    def test_status_bands(self, score, status):
        assert status_for_score(score) == status

    @pytest.mark.parametrize(
        "score,grade",
        [(96, "A+"), (95, "A"), (90.5, "A"), (80, "B"), (50, "D"), (40.01, "D-"),
         (40, "F"), (0, "F")],
    )
    def test_grade_bands(self, score, grade):
        assert grade_for_score(score) == grade

    @pytest.mark.parametrize(
        "raw,expected", [(150, 100.0), (-5, 0.0), (math.nan, 0.0), (72.456, 72.46)]
    )
    def test_check_score_is_clamped(self, raw, expected):
        check = HealthCheck(
            category=HealthCategory.STRUCTURE,
            name="Account Structure",
            score=raw,
            finding="f",
            recommendation="r",
        )
        assert check.score == expected

    def test_status_serialized_with_check(self):
        check = HealthCheck(
            category=HealthCategory.STRUCTURE,
            name="Account Structure",
            score=45,
            finding="f",
            recommendation="r",
            low_confidence=True,
        )
        dumped = check.model_dump(by_alias=True, mode="json")
        assert dumped["status"] == "WARNING"
        assert dumped["lowConfidence"] is True
        assert dumped["category"] == "STRUCTURE"
