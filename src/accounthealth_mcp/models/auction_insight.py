"""Auction insight data models."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, clean_identity
from accounthealth_mcp.utils.parsing import clean_ratio

# Rows that describe the advertiser itself or tracking tools, not competitors
NON_COMPETITOR_DOMAINS = frozenset(
    {"", "you", "unknown", "monitor.clickcease.com"}
)


class AuctionInsightRow(PerformanceRecord):
    """One competitor's auction overlap figures for a campaign."""

    campaign_id: str = Field(default="", description="Campaign ID")
    competitor: str = Field(
        default="",
        validation_alias=AliasChoices(
            "competitor", "domain", "displayDomain", "display_domain"
        ),
    )
    impression_share: float | None = Field(default=None)
    overlap_rate: float | None = Field(default=None)
    outranking_share: float | None = Field(default=None)
    position_above_rate: float | None = Field(default=None)
    top_of_page_rate: float | None = Field(default=None)
    abs_top_of_page_rate: float | None = Field(default=None)

    @field_validator("campaign_id", "competitor", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator(
        "impression_share",
        "overlap_rate",
        "outranking_share",
        "position_above_rate",
        "top_of_page_rate",
        "abs_top_of_page_rate",
        mode="before",
    )
    @classmethod
    def clean_ratio_fields(cls, v: Any) -> float | None:
        """Convert percent strings such as "< 10%" into ratios."""
        return clean_ratio(v)

    @property
    def is_competitor(self) -> bool:
        """False for the advertiser's own row and known non-competitor domains."""
        return self.competitor.lower() not in NON_COMPETITOR_DOMAINS
