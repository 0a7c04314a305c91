"""Device performance data models."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, clean_identity
from accounthealth_mcp.utils.parsing import coerce_enum


class DeviceType(str, Enum):
    """Supported device types."""

    MOBILE = "MOBILE"
    DESKTOP = "DESKTOP"
    TABLET = "TABLET"
    CONNECTED_TV = "CONNECTED_TV"
    OTHER = "OTHER"
    UNKNOWN = "UNKNOWN"


DEVICE_CODES = {
    2: DeviceType.MOBILE,
    3: DeviceType.TABLET,
    4: DeviceType.DESKTOP,
    5: DeviceType.OTHER,
    6: DeviceType.CONNECTED_TV,
}

# Spellings used by the Google Ads UI and its exports
DEVICE_ALIASES = {
    "mobile phones": DeviceType.MOBILE,
    "computers": DeviceType.DESKTOP,
    "tablets": DeviceType.TABLET,
    "tv screens": DeviceType.CONNECTED_TV,
    "tv": DeviceType.CONNECTED_TV,
}


class DeviceStat(PerformanceRecord):
    """Performance for one device segment (account or campaign level)."""

    campaign_id: str = Field(default="", description="Campaign ID, empty for account")
    device: DeviceType = Field(
        default=DeviceType.UNKNOWN,
        validation_alias=AliasChoices("device", "deviceType", "device_type"),
    )

    @field_validator("campaign_id", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("device", mode="before")
    @classmethod
    def clean_device(cls, v: Any) -> DeviceType:
        """Map device names, UI spellings and API codes onto DeviceType."""
        return coerce_enum(
            v,
            DeviceType,
            DeviceType.UNKNOWN,
            codes=DEVICE_CODES,
            aliases=DEVICE_ALIASES,
        )
