"""Ad data models."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, StatusMixin, clean_identity
from accounthealth_mcp.utils.parsing import clean_text, coerce_enum, to_int


class AdStrength(str, Enum):
    """Responsive ad strength ratings."""

    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    AVERAGE = "AVERAGE"
    POOR = "POOR"
    UNSPECIFIED = "UNSPECIFIED"


AD_STRENGTH_CODES = {
    4: AdStrength.POOR,
    5: AdStrength.AVERAGE,
    6: AdStrength.GOOD,
    7: AdStrength.EXCELLENT,
}


class Ad(StatusMixin, PerformanceRecord):
    """Ad with its strength rating and asset counts."""

    id: str = Field(default="", description="Ad ID")
    ad_group_id: str = Field(default="", description="Parent ad group ID")
    type: str = Field(default="", description="Ad type, e.g. RESPONSIVE_SEARCH_AD")
    ad_strength: AdStrength = Field(default=AdStrength.UNSPECIFIED)
    headlines_count: int = Field(
        default=0,
        validation_alias=AliasChoices("headlines_count", "headlinesCount", "headlines"),
    )
    descriptions_count: int = Field(
        default=0,
        validation_alias=AliasChoices(
            "descriptions_count", "descriptionsCount", "descriptions"
        ),
    )

    @field_validator("id", "ad_group_id", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("type", mode="before")
    @classmethod
    def clean_type(cls, v: Any) -> str:
        return clean_text(v).upper()

    @field_validator("ad_strength", mode="before")
    @classmethod
    def clean_ad_strength(cls, v: Any) -> AdStrength:
        """Map strength names and API codes; PENDING/NO_ADS become UNSPECIFIED."""
        return coerce_enum(
            v, AdStrength, AdStrength.UNSPECIFIED, codes=AD_STRENGTH_CODES
        )

    @field_validator("headlines_count", "descriptions_count", mode="before")
    @classmethod
    def clean_counts(cls, v: Any) -> int:
        """Accept either a count or the asset list itself."""
        if isinstance(v, (list, tuple)):
            return len(v)
        return max(0, to_int(v))

    @property
    def is_rated(self) -> bool:
        return self.ad_strength != AdStrength.UNSPECIFIED
