"""Normalized account snapshot and per-source fetch failures."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from accounthealth_mcp.models.ad import Ad
from accounthealth_mcp.models.ad_group import AdGroup
from accounthealth_mcp.models.asset import AssetPerformance
from accounthealth_mcp.models.auction_insight import AuctionInsightRow
from accounthealth_mcp.models.campaign import Campaign
from accounthealth_mcp.models.change_event import ChangeEvent
from accounthealth_mcp.models.conversion_action import ConversionAction
from accounthealth_mcp.models.device import DeviceStat
from accounthealth_mcp.models.keyword import Keyword, NegativeKeyword
from accounthealth_mcp.models.product import PMaxProduct
from accounthealth_mcp.models.search_term import SearchTerm


class DataSource(str, Enum):
    """The twelve upstream collections, in entry point order."""

    CAMPAIGNS = "campaigns"
    AD_GROUPS = "ad_groups"
    KEYWORDS = "keywords"
    ADS = "ads"
    NEGATIVE_KEYWORDS = "negative_keywords"
    SEARCH_TERMS = "search_terms"
    AUCTION_INSIGHTS = "auction_insights"
    DEVICE_STATS = "device_stats"
    ASSET_PERFORMANCE = "asset_performance"
    CHANGE_EVENTS = "change_events"
    CONVERSION_ACTIONS = "conversion_actions"
    PMAX_PRODUCTS = "pmax_products"


SOURCE_LABELS: dict[DataSource, str] = {
    DataSource.CAMPAIGNS: "Campaigns",
    DataSource.AD_GROUPS: "Ad groups",
    DataSource.KEYWORDS: "Keywords",
    DataSource.ADS: "Ads",
    DataSource.NEGATIVE_KEYWORDS: "Negative keywords",
    DataSource.SEARCH_TERMS: "Search terms",
    DataSource.AUCTION_INSIGHTS: "Auction insights",
    DataSource.DEVICE_STATS: "Device stats",
    DataSource.ASSET_PERFORMANCE: "Asset performance",
    DataSource.CHANGE_EVENTS: "Change history",
    DataSource.CONVERSION_ACTIONS: "Conversion actions",
    DataSource.PMAX_PRODUCTS: "PMax products",
}

# Singular nouns for "no <noun> records returned"
SOURCE_RECORD_NOUNS: dict[DataSource, str] = {
    DataSource.CAMPAIGNS: "campaign",
    DataSource.AD_GROUPS: "ad group",
    DataSource.KEYWORDS: "keyword",
    DataSource.ADS: "ad",
    DataSource.NEGATIVE_KEYWORDS: "negative keyword",
    DataSource.SEARCH_TERMS: "search term",
    DataSource.AUCTION_INSIGHTS: "auction insight",
    DataSource.DEVICE_STATS: "device",
    DataSource.ASSET_PERFORMANCE: "asset",
    DataSource.CHANGE_EVENTS: "change event",
    DataSource.CONVERSION_ACTIONS: "conversion action",
    DataSource.PMAX_PRODUCTS: "PMax product",
}


class SourceState(str, Enum):
    """Availability of one source within a snapshot."""

    AVAILABLE = "available"
    EMPTY = "empty"
    UNAVAILABLE = "unavailable"


class FetchError(BaseModel):
    """Marks a collection whose upstream fetch failed.

    Passed in place of a list so the engine can tell "no activity" apart from
    "could not fetch".
    """

    source: str = ""
    message: str = "fetch failed"
    error_type: str = ""

    @classmethod
    def from_exception(cls, source: str, exc: BaseException) -> "FetchError":
        """Build a fetch error from a caught exception."""
        return cls(
            source=source,
            message=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
        )

    def __str__(self) -> str:
        return self.message


class AccountSnapshot(BaseModel):
    """The normalized bundle every evaluator receives."""

    campaigns: list[Campaign] = Field(default_factory=list)
    ad_groups: list[AdGroup] = Field(default_factory=list)
    keywords: list[Keyword] = Field(default_factory=list)
    ads: list[Ad] = Field(default_factory=list)
    negative_keywords: list[NegativeKeyword] = Field(default_factory=list)
    search_terms: list[SearchTerm] = Field(default_factory=list)
    auction_insights: list[AuctionInsightRow] = Field(default_factory=list)
    device_stats: list[DeviceStat] = Field(default_factory=list)
    asset_performance: list[AssetPerformance] = Field(default_factory=list)
    change_events: list[ChangeEvent] = Field(default_factory=list)
    conversion_actions: list[ConversionAction] = Field(default_factory=list)
    pmax_products: list[PMaxProduct] = Field(default_factory=list)

    unavailable: dict[str, str] = Field(
        default_factory=dict, description="Source name to fetch error message"
    )
    skipped: dict[str, int] = Field(
        default_factory=dict, description="Source name to records dropped as unusable"
    )

    def collection(self, source: DataSource | str) -> list[Any]:
        """Return the collection for ``source``."""
        return getattr(self, DataSource(source).value)

    def source_state(self, source: DataSource | str) -> SourceState:
        """Whether a source has records, returned none, or failed to fetch."""
        name = DataSource(source).value
        if name in self.unavailable:
            return SourceState.UNAVAILABLE
        if not self.collection(name):
            return SourceState.EMPTY
        return SourceState.AVAILABLE

    def describe_missing(self, source: DataSource | str) -> str:
        """Explain why a source has no records, for use in findings."""
        source = DataSource(source)
        if source.value in self.unavailable:
            label = SOURCE_LABELS[source].lower()
            reason = self.unavailable[source.value]
            return f"{label} source unavailable (fetch failed: {reason})"
        return f"no {SOURCE_RECORD_NOUNS[source]} records returned"

    def active_campaigns(self) -> list[Campaign]:
        return [c for c in self.campaigns if c.is_active]

    def active_ad_groups(self) -> list[AdGroup]:
        """Active ad groups, restricted to active campaigns when campaigns exist."""
        groups = [ag for ag in self.ad_groups if ag.is_active]
        if not self.campaigns:
            return groups
        campaign_ids = {c.id for c in self.active_campaigns()}
        return [ag for ag in groups if ag.campaign_id in campaign_ids]

    def active_ad_group_ids(self) -> set[str]:
        return {ag.id for ag in self.active_ad_groups()}

    def active_keywords(self) -> list[Keyword]:
        """Active keywords, restricted to active ad groups when ad groups exist."""
        keywords = [k for k in self.keywords if k.is_active]
        if not self.ad_groups:
            return keywords
        ad_group_ids = self.active_ad_group_ids()
        return [k for k in keywords if k.ad_group_id in ad_group_ids]

    def record_counts(self) -> dict[str, int]:
        return {source.value: len(self.collection(source)) for source in DataSource}

    @property
    def is_empty(self) -> bool:
        return not any(self.record_counts().values())
