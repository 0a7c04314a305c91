"""Ad group data models."""

from typing import Any

from pydantic import Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, StatusMixin, clean_identity


class AdGroup(StatusMixin, PerformanceRecord):
    """Ad group with performance metrics."""

    id: str = Field(default="", description="Ad group ID")
    campaign_id: str = Field(default="", description="Parent campaign ID")
    name: str = Field(default="", description="Ad group name")

    @field_validator("id", "campaign_id", "name", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)
