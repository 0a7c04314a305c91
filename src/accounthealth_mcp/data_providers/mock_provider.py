"""Mock data provider for testing and demos."""

import random
from datetime import datetime, timedelta
from typing import Any

from accounthealth_mcp.core.exceptions import DataError
from accounthealth_mcp.data_providers.base import AccountDataProvider, Records
from accounthealth_mcp.models.snapshot import DataSource


class MockDataProvider(AccountDataProvider):
    """Mock data provider returning a small, realistic sample account.

    Records use the upstream camelCase shape so they exercise the same
    normalization path as live data. Metrics carry seeded variance, so two
    providers with the same seed return identical data.
    """

    def __init__(
        self,
        seed: int = 42,
        failing_sources: set[DataSource] | None = None,
        empty_sources: set[DataSource] | None = None,
    ):
        """Initialize the mock data provider.

        Args:
            seed: Random seed for consistent test data generation
            failing_sources: Sources whose fetch raises, to simulate outages
            empty_sources: Sources that return no records
        """
        self.seed = seed
        self.failing_sources = failing_sources or set()
        self.empty_sources = empty_sources or set()
        self._random = random.Random(seed)

    def _add_variance(self, base_value: float, variance_pct: float = 0.1) -> float:
        """Add seeded random variance to a base value.

        Args:
            base_value: The base value to vary
            variance_pct: Percentage variance (0.1 = ±10%)

        Returns:
            Value with random variance applied
        """
        variance = base_value * variance_pct
        return max(0, base_value + self._random.uniform(-variance, variance))

    def _serve(self, source: DataSource, records: list[dict[str, Any]]) -> Records:
        if source in self.failing_sources:
            raise DataError(f"Simulated {source.value} fetch failure")
        if source in self.empty_sources:
            return []
        return records

    def _metrics(
        self, impressions: int, clicks: int, cost: float, conv: float, value: float
    ) -> dict[str, Any]:
        return {
            "impressions": int(self._add_variance(impressions)),
            "clicks": int(self._add_variance(clicks)),
            "cost": round(self._add_variance(cost), 2),
            "conversions": round(self._add_variance(conv), 1) if conv else 0.0,
            "conversionValue": round(self._add_variance(value), 2) if value else 0.0,
        }

    async def get_campaigns(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return three Search campaigns and one Performance Max campaign."""
        campaigns = [
            {
                "id": "1001",
                "name": "Brand - Core",
                "status": "ENABLED",
                "channelType": "SEARCH",
                "searchImpressionShare": 0.82,
                "searchLostISRank": 0.1,
                "searchLostISBudget": 0.08,
                **self._metrics(12000, 1500, 900.0, 120.0, 7200.0),
            },
            {
                "id": "1002",
                "name": "Generic - Shoes",
                "status": "ENABLED",
                "channelType": "SEARCH",
                "searchImpressionShare": "45%",
                "searchLostISRank": "35%",
                "searchLostISBudget": "20%",
                **self._metrics(40000, 2200, 3100.0, 60.0, 4100.0),
            },
            {
                "id": "1003",
                "name": "Generic - Sale",
                "status": "ENABLED",
                "channelType": 2,
                "searchImpressionShare": "< 10%",
                "searchLostISRank": 0.7,
                "searchLostISBudget": 0.25,
                **self._metrics(9000, 400, 800.0, 4.0, 300.0),
            },
            {
                "id": "1004",
                "name": "PMax - Catalog",
                "status": "ENABLED",
                "channelType": "PERFORMANCE_MAX",
                **self._metrics(60000, 1800, 2400.0, 70.0, 9800.0),
            },
        ]
        return self._serve(DataSource.CAMPAIGNS, campaigns)

    async def get_ad_groups(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return ad groups for the Search campaigns."""
        ad_groups = [
            {"id": "2001", "campaignId": "1001", "name": "Brand Shoes"},
            {"id": "2002", "campaignId": "1002", "name": "Running Shoes"},
            {"id": "2003", "campaignId": "1002", "name": "Trail Shoes"},
            {"id": "2004", "campaignId": "1003", "name": "Shoe Sale"},
            {"id": "2005", "campaignId": "1003", "name": "Old Promo", "status": 3},
        ]
        for ad_group in ad_groups:
            ad_group.setdefault("status", "ENABLED")
            ad_group.update(self._metrics(5000, 300, 400.0, 10.0, 800.0))
        return self._serve(DataSource.AD_GROUPS, ad_groups)

    async def get_keywords(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return keywords with mixed match types and quality scores."""
        rows = [
            ("3001", "2001", "1001", "brand shoes", "EXACT", 9, "ABOVE_AVERAGE"),
            ("3002", "2001", "1001", "brand sneakers", "PHRASE", 8, "AVERAGE"),
            ("3003", "2002", "1002", "running shoes", "BROAD", 6, "AVERAGE"),
            ("3004", "2002", "1002", "best running shoes", "PHRASE", 5, "AVERAGE"),
            ("3005", "2003", "1002", "trail shoes", "EXACT", 7, "AVERAGE"),
            ("3006", "2003", "1002", "hiking shoes", "BROAD", 4, "BELOW_AVERAGE"),
            ("3007", "2004", "1003", "shoe sale", "BROAD", 3, "BELOW_AVERAGE"),
            ("3008", "2004", "1003", "cheap shoes", "BROAD_MATCH", None, None),
        ]
        keywords = [
            {
                "id": kw_id,
                "adGroupId": ad_group_id,
                "campaignId": campaign_id,
                "keywordText": text,
                "matchType": match_type,
                "status": "ENABLED",
                "qualityScore": qs,
                "expectedCtr": bucket,
                "adRelevance": "AVERAGE",
                "landingPageExperience": (
                    "BELOW_AVERAGE" if qs is not None and qs < 5 else "AVERAGE"
                ),
                **self._metrics(3000, 200, 250.0, 8.0, 500.0),
            }
            for kw_id, ad_group_id, campaign_id, text, match_type, qs, bucket in rows
        ]
        return self._serve(DataSource.KEYWORDS, keywords)

    async def get_ads(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return responsive search ads with a spread of ad strengths."""
        rows = [
            ("4001", "2001", "EXCELLENT"),
            ("4002", "2001", "GOOD"),
            ("4003", "2002", "AVERAGE"),
            ("4004", "2002", "POOR"),
            ("4005", "2003", "GOOD"),
            ("4006", "2004", "POOR"),
        ]
        ads = [
            {
                "id": ad_id,
                "adGroupId": ad_group_id,
                "type": "RESPONSIVE_SEARCH_AD",
                "status": "ENABLED",
                "adStrength": strength,
                "headlinesCount": 12 if strength in ("EXCELLENT", "GOOD") else 5,
                "descriptionsCount": 4 if strength in ("EXCELLENT", "GOOD") else 2,
                **self._metrics(4000, 250, 300.0, 9.0, 600.0),
            }
            for ad_id, ad_group_id, strength in rows
        ]
        return self._serve(DataSource.ADS, ads)

    async def get_negative_keywords(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return a few campaign and shared-list negatives."""
        negatives = [
            {"id": "5001", "campaignId": "1002", "text": "free", "matchType": "BROAD"},
            {"id": "5002", "campaignId": "1002", "text": "jobs", "matchType": "PHRASE"},
            {
                "id": "5003",
                "text": "repair",
                "matchType": "BROAD",
                "level": "SHARED_LIST",
            },
        ]
        return self._serve(DataSource.NEGATIVE_KEYWORDS, negatives)

    async def get_search_terms(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return search terms with winning and wasteful patterns."""
        rows = [
            ("brand shoes", "1001", "2001", 5000, 500, 250.0, 50.0, 2500.0),
            ("brand shoes near me", "1001", "2001", 3000, 450, 225.0, 45.0, 2250.0),
            ("running shoes men", "1002", "2002", 8000, 400, 380.0, 12.0, 960.0),
            ("running shoes women", "1002", "2002", 7000, 380, 360.0, 10.0, 800.0),
            ("free running shoes", "1002", "2002", 2500, 120, 95.0, 0.0, 0.0),
            ("cheap shoes online", "1003", "2004", 4000, 210, 160.0, 0.0, 0.0),
            ("cheap shoes outlet", "1003", "2004", 3500, 180, 140.0, 1.0, 40.0),
            ("shoe repair near me", "1003", "2004", 1200, 60, 45.0, 0.0, 0.0),
            ("trail shoes waterproof", "1002", "2003", 2200, 150, 130.0, 6.0, 720.0),
            ("trail shoes sale", "1002", "2003", 1800, 110, 90.0, 4.0, 480.0),
        ]
        search_terms = [
            {
                "searchTerm": term,
                "campaignId": campaign_id,
                "adGroupId": ad_group_id,
                **self._metrics(*metrics),
            }
            for term, campaign_id, ad_group_id, *metrics in rows
        ]
        return self._serve(DataSource.SEARCH_TERMS, search_terms)

    async def get_auction_insights(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return competitor rows plus the advertiser's own row."""
        insights = [
            {
                "campaignId": "1002",
                "domain": "You",
                "impressionShare": 0.45,
                "overlapRate": None,
            },
            {
                "campaignId": "1002",
                "domain": "shoemart.example",
                "impressionShare": "38%",
                "overlapRate": "42%",
                "outrankingShare": "31%",
                "positionAboveRate": "55%",
            },
            {
                "campaignId": "1002",
                "domain": "runfast.example",
                "impressionShare": "< 10%",
                "overlapRate": "12%",
                "outrankingShare": "60%",
            },
        ]
        return self._serve(DataSource.AUCTION_INSIGHTS, insights)

    async def get_device_stats(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return account-level device performance."""
        stats = [
            {"device": "MOBILE", **self._metrics(70000, 3600, 4200.0, 90.0, 8100.0)},
            {"device": "DESKTOP", **self._metrics(40000, 1900, 2600.0, 140.0, 12600.0)},
            {"device": "TABLET", **self._metrics(5000, 150, 180.0, 4.0, 300.0)},
        ]
        return self._serve(DataSource.DEVICE_STATS, stats)

    async def get_asset_performance(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return responsive ad assets with labels and approval status."""
        rows = [
            ("6001", "HEADLINE", "BEST", "APPROVED"),
            ("6002", "HEADLINE", "GOOD", "APPROVED"),
            ("6003", "HEADLINE", "LOW", "APPROVED"),
            ("6004", "DESCRIPTION", "GOOD", "APPROVED"),
            ("6005", "DESCRIPTION", "LEARNING", "APPROVED_LIMITED"),
            ("6006", "SITELINK", "POOR", "DISAPPROVED"),
        ]
        assets = [
            {
                "id": asset_id,
                "fieldType": field_type,
                "assetType": "TEXT",
                "performanceLabel": label,
                "approvalStatus": approval,
            }
            for asset_id, field_type, label, approval in rows
        ]
        return self._serve(DataSource.ASSET_PERFORMANCE, assets)

    async def get_change_events(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return one change per few days of the period."""
        days = max(1, (end_date - start_date).days)
        events = [
            {
                "id": f"7{i:03d}",
                "changeDateTime": (start_date + timedelta(days=i)).isoformat(),
                "changeResourceType": "AD_GROUP_CRITERION" if i % 2 else "CAMPAIGN",
                "clientType": "GOOGLE_ADS_WEB_CLIENT",
                "userEmail": "analyst@example.com",
            }
            for i in range(0, days, 3)
        ]
        return self._serve(DataSource.CHANGE_EVENTS, events)

    async def get_conversion_actions(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return a primary purchase action and a secondary micro conversion."""
        actions = [
            {
                "id": "8001",
                "name": "Purchase",
                "status": "ENABLED",
                "category": "PURCHASE",
                "includeInConversionsMetric": True,
                "allConversions": 254.0,
                "value": 60.0,
            },
            {
                "id": "8002",
                "name": "Newsletter signup",
                "status": "ENABLED",
                "category": "SIGNUP",
                "includeInConversionsMetric": False,
                "allConversions": 410.0,
                "value": 0.0,
            },
        ]
        return self._serve(DataSource.CONVERSION_ACTIONS, actions)

    async def get_pmax_products(
        self, customer_id: str, start_date: datetime, end_date: datetime
    ) -> Records:
        """Return Performance Max products, some never converting."""
        rows = [
            ("sku-100", "Trail Runner X", 900.0, 30.0, 4200.0),
            ("sku-101", "Road Runner Pro", 700.0, 25.0, 3500.0),
            ("sku-102", "Canvas Slip-On", 420.0, 0.0, 0.0),
            ("sku-103", "Leather Boot", 380.0, 15.0, 2100.0),
        ]
        products = [
            {
                "itemId": item_id,
                "title": title,
                "channel": "ONLINE",
                **self._metrics(15000, 450, cost, conv, value),
            }
            for item_id, title, cost, conv, value in rows
        ]
        return self._serve(DataSource.PMAX_PRODUCTS, products)
