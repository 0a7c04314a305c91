"""Change history data models."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import BaseEntityModel, clean_identity
from accounthealth_mcp.utils.parsing import clean_text


class ChangeEvent(BaseEntityModel):
    """One entry from the account change history."""

    id: str = Field(default="", description="Change event ID")
    change_date_time: str = Field(default="", description="Timestamp as reported")
    resource_type: str = Field(
        default="",
        validation_alias=AliasChoices(
            "resource_type", "resourceType", "changeResourceType"
        ),
    )
    client_type: str = Field(default="", description="e.g. GOOGLE_ADS_WEB_CLIENT")
    user_email: str = Field(default="", description="User who made the change")

    @field_validator("id", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator(
        "change_date_time", "resource_type", "client_type", "user_email", mode="before"
    )
    @classmethod
    def clean_text_fields(cls, v: Any) -> str:
        return clean_text(v)
