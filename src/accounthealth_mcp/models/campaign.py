"""Campaign data models."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, StatusMixin, clean_identity
from accounthealth_mcp.utils.parsing import clean_ratio, coerce_enum


class ChannelType(str, Enum):
    """Advertising channel types."""

    SEARCH = "SEARCH"
    DISPLAY = "DISPLAY"
    SHOPPING = "SHOPPING"
    HOTEL = "HOTEL"
    VIDEO = "VIDEO"
    MULTI_CHANNEL = "MULTI_CHANNEL"
    LOCAL = "LOCAL"
    SMART = "SMART"
    PERFORMANCE_MAX = "PERFORMANCE_MAX"
    LOCAL_SERVICES = "LOCAL_SERVICES"
    TRAVEL = "TRAVEL"
    DEMAND_GEN = "DEMAND_GEN"
    UNKNOWN = "UNKNOWN"


CHANNEL_CODES = {
    2: ChannelType.SEARCH,
    3: ChannelType.DISPLAY,
    4: ChannelType.SHOPPING,
    5: ChannelType.HOTEL,
    6: ChannelType.VIDEO,
    7: ChannelType.MULTI_CHANNEL,
    8: ChannelType.LOCAL,
    9: ChannelType.SMART,
    10: ChannelType.PERFORMANCE_MAX,
    11: ChannelType.LOCAL_SERVICES,
    13: ChannelType.TRAVEL,
    14: ChannelType.DEMAND_GEN,
}

CHANNEL_ALIASES = {
    "pmax": ChannelType.PERFORMANCE_MAX,
    "performance max": ChannelType.PERFORMANCE_MAX,
    "discovery": ChannelType.DEMAND_GEN,
    "demand gen": ChannelType.DEMAND_GEN,
}


class Campaign(StatusMixin, PerformanceRecord):
    """Campaign with performance and impression share metrics."""

    id: str = Field(default="", description="Campaign ID")
    name: str = Field(default="", description="Campaign name")
    channel_type: ChannelType = Field(
        default=ChannelType.UNKNOWN,
        alias="channelType",
        validation_alias=AliasChoices(
            "channel_type", "channelType", "advertisingChannelType", "type"
        ),
    )

    # Impression share ratios in [0, 1], None when not reported
    search_impression_share: float | None = Field(default=None)
    search_lost_is_rank: float | None = Field(
        default=None,
        alias="searchLostISRank",
        validation_alias=AliasChoices(
            "search_lost_is_rank", "searchLostISRank", "searchLostIsRank"
        ),
    )
    search_lost_is_budget: float | None = Field(
        default=None,
        alias="searchLostISBudget",
        validation_alias=AliasChoices(
            "search_lost_is_budget", "searchLostISBudget", "searchLostIsBudget"
        ),
    )

    @field_validator("id", "name", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("channel_type", mode="before")
    @classmethod
    def clean_channel_type(cls, v: Any) -> ChannelType:
        """Map channel names and API codes onto ChannelType."""
        return coerce_enum(
            v,
            ChannelType,
            ChannelType.UNKNOWN,
            codes=CHANNEL_CODES,
            aliases=CHANNEL_ALIASES,
        )

    @field_validator(
        "search_impression_share",
        "search_lost_is_rank",
        "search_lost_is_budget",
        mode="before",
    )
    @classmethod
    def clean_ratio_fields(cls, v: Any) -> float | None:
        """Convert percent strings such as "< 10%" into ratios."""
        return clean_ratio(v)
