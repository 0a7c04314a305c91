"""Data models for the account health engine."""

from accounthealth_mcp.models.ad import Ad, AdStrength
from accounthealth_mcp.models.ad_group import AdGroup
from accounthealth_mcp.models.asset import (
    ApprovalStatus,
    AssetPerformance,
    AssetPerformanceLabel,
)
from accounthealth_mcp.models.auction_insight import AuctionInsightRow
from accounthealth_mcp.models.base import (
    BaseEntityModel,
    EntityStatus,
    PerformanceRecord,
)
from accounthealth_mcp.models.campaign import Campaign, ChannelType
from accounthealth_mcp.models.change_event import ChangeEvent
from accounthealth_mcp.models.conversion_action import ConversionAction
from accounthealth_mcp.models.device import DeviceStat, DeviceType
from accounthealth_mcp.models.health import (
    CATEGORY_ORDER,
    DEFAULT_CATEGORY_WEIGHTS,
    NEUTRAL_SCORE,
    HealthCategory,
    HealthCheck,
    HealthScoreReport,
    HealthStatus,
    grade_for_score,
    status_for_score,
)
from accounthealth_mcp.models.keyword import (
    Keyword,
    MatchType,
    NegativeKeyword,
    NegativeLevel,
    QualityBucket,
)
from accounthealth_mcp.models.ngram import NGramAnalysisResult, NGramMetrics
from accounthealth_mcp.models.product import PMaxProduct
from accounthealth_mcp.models.search_term import SearchTerm
from accounthealth_mcp.models.snapshot import (
    AccountSnapshot,
    DataSource,
    FetchError,
    SourceState,
)

__all__ = [
    "AccountSnapshot",
    "Ad",
    "AdGroup",
    "AdStrength",
    "ApprovalStatus",
    "AssetPerformance",
    "AssetPerformanceLabel",
    "AuctionInsightRow",
    "BaseEntityModel",
    "CATEGORY_ORDER",
    "Campaign",
    "ChangeEvent",
    "ChannelType",
    "ConversionAction",
    "DEFAULT_CATEGORY_WEIGHTS",
    "DataSource",
    "DeviceStat",
    "DeviceType",
    "EntityStatus",
    "FetchError",
    "HealthCategory",
    "HealthCheck",
    "HealthScoreReport",
    "HealthStatus",
    "Keyword",
    "MatchType",
    "NEUTRAL_SCORE",
    "NGramAnalysisResult",
    "NGramMetrics",
    "NegativeKeyword",
    "NegativeLevel",
    "PMaxProduct",
    "PerformanceRecord",
    "QualityBucket",
    "SearchTerm",
    "SourceState",
    "grade_for_score",
    "status_for_score",
]
