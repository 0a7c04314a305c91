"""Search term data models."""

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, clean_identity


class SearchTerm(PerformanceRecord):
    """A search query that triggered an ad, with its performance."""

    search_term: str = Field(
        default="",
        alias="searchTerm",
        validation_alias=AliasChoices("search_term", "searchTerm", "term", "query"),
    )
    campaign_id: str = Field(default="", description="Campaign ID")
    ad_group_id: str = Field(default="", description="Ad group ID")
    keyword_text: str = Field(
        default="",
        validation_alias=AliasChoices("keyword_text", "keywordText", "keyword"),
    )

    @field_validator(
        "search_term", "campaign_id", "ad_group_id", "keyword_text", mode="before"
    )
    @classmethod
    def clean_text_fields(cls, v: Any) -> str:
        """Clean text fields."""
        return clean_identity(v)
