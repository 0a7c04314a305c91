"""Performance Max product data models."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, clean_identity


class PMaxProduct(PerformanceRecord):
    """Shopping product performance within Performance Max campaigns."""

    item_id: str = Field(
        default="",
        validation_alias=AliasChoices("item_id", "itemId", "id", "productItemId"),
    )
    title: str = Field(default="", description="Product title")
    channel: str = Field(default="", description="ONLINE or LOCAL")

    @field_validator("item_id", "title", "channel", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)
