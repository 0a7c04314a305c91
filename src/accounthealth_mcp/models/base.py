"""Base models shared by every normalized Google Ads entity."""

from enum import Enum
from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from accounthealth_mcp.utils.parsing import clean_text, coerce_enum, to_float, to_int


class EntityStatus(str, Enum):
    """Serving status shared by campaigns, ad groups, keywords and ads."""

    ENABLED = "ENABLED"
    PAUSED = "PAUSED"
    REMOVED = "REMOVED"
    UNKNOWN = "UNKNOWN"


# Google Ads API enum codes
STATUS_CODES = {
    2: EntityStatus.ENABLED,
    3: EntityStatus.PAUSED,
    4: EntityStatus.REMOVED,
}


def parse_status(value: Any) -> EntityStatus:
    """Parse an entity status name or API code."""
    return coerce_enum(value, EntityStatus, EntityStatus.UNKNOWN, codes=STATUS_CODES)


class BaseEntityModel(PydanticBaseModel):
    """Base model for all normalized entities.

    Accepts both upstream camelCase keys and snake_case field names; unknown
    keys are dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PerformanceRecord(BaseEntityModel):
    """Metrics shape underlying every performance-bearing entity.

    All metrics default to 0 when absent, null, non-numeric or non-finite.
    Derived rates are zero-guarded and never NaN/inf.
    """

    impressions: int = Field(default=0, description="Total impressions")
    clicks: int = Field(default=0, description="Total clicks")
    cost: float = Field(default=0.0, description="Total cost in account currency")
    conversions: float = Field(default=0.0, description="Total conversions")
    conversion_value: float = Field(default=0.0, description="Total conversion value")

    @field_validator("impressions", "clicks", mode="before")
    @classmethod
    def clean_integer_fields(cls, v: Any) -> int:
        """Clean and validate integer metric fields."""
        return to_int(v)

    @field_validator("cost", "conversions", "conversion_value", mode="before")
    @classmethod
    def clean_float_fields(cls, v: Any) -> float:
        """Clean and validate float metric fields."""
        return to_float(v)

    @computed_field  # type: ignore[misc]
    @property
    def ctr(self) -> float:
        """Click-through rate as a ratio."""
        return self.clicks / self.impressions if self.impressions > 0 else 0.0

    @computed_field  # type: ignore[misc]
    @property
    def cpc(self) -> float:
        """Calculate cost per click."""
        return self.cost / self.clicks if self.clicks > 0 else 0.0

    @computed_field  # type: ignore[misc]
    @property
    def cpa(self) -> float:
        """Calculate cost per acquisition."""
        return self.cost / self.conversions if self.conversions > 0 else 0.0

    @computed_field  # type: ignore[misc]
    @property
    def roas(self) -> float:
        """Calculate return on ad spend."""
        return self.conversion_value / self.cost if self.cost > 0 else 0.0

    @computed_field  # type: ignore[misc]
    @property
    def conversion_rate(self) -> float:
        """Conversions per click as a ratio."""
        return self.conversions / self.clicks if self.clicks > 0 else 0.0


class StatusMixin(BaseEntityModel):
    """Adds the serving status and the 'counts as active' rule."""

    status: EntityStatus = Field(default=EntityStatus.UNKNOWN)

    @field_validator("status", mode="before")
    @classmethod
    def clean_status(cls, v: Any) -> EntityStatus:
        """Map status names and API codes onto EntityStatus."""
        return parse_status(v)

    @property
    def is_active(self) -> bool:
        """Enabled, of unknown status, or paused/removed but still serving data."""
        if self.status in (EntityStatus.ENABLED, EntityStatus.UNKNOWN):
            return True
        return getattr(self, "impressions", 0) > 0


def clean_identity(v: Any) -> str:
    """Coerce ids and names (often numeric upstream) to stripped strings."""
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    return clean_text(v)
