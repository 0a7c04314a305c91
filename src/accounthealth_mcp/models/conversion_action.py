"""Conversion action data models."""

from typing import Any

from pydantic import Field, field_validator

from accounthealth_mcp.models.base import (
    BaseEntityModel,
    EntityStatus,
    StatusMixin,
    clean_identity,
)
from accounthealth_mcp.utils.parsing import clean_bool, clean_text, to_float


class ConversionAction(StatusMixin, BaseEntityModel):
    """A configured conversion action and its recent volume."""

    id: str = Field(default="", description="Conversion action ID")
    name: str = Field(default="", description="Conversion action name")
    category: str = Field(default="", description="e.g. PURCHASE, LEAD")
    include_in_conversions_metric: bool = Field(
        default=False, description="Primary action counted in Conversions"
    )
    all_conversions: float = Field(default=0.0)
    value: float = Field(default=0.0, description="Default conversion value")

    @field_validator("id", "name", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("category", mode="before")
    @classmethod
    def clean_category(cls, v: Any) -> str:
        return clean_text(v).upper()

    @field_validator("include_in_conversions_metric", mode="before")
    @classmethod
    def clean_primary_flag(cls, v: Any) -> bool:
        return clean_bool(v)

    @field_validator("all_conversions", "value", mode="before")
    @classmethod
    def clean_float_fields(cls, v: Any) -> float:
        """Clean and validate float metric fields."""
        return to_float(v)

    @property
    def is_primary(self) -> bool:
        """Enabled and included in the Conversions column."""
        return (
            self.status == EntityStatus.ENABLED and self.include_in_conversions_metric
        )
