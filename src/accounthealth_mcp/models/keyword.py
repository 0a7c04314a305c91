"""Keyword and negative keyword data models."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import (
    BaseEntityModel,
    PerformanceRecord,
    StatusMixin,
    clean_identity,
)
from accounthealth_mcp.utils.parsing import clean_numeric_value, coerce_enum


class MatchType(str, Enum):
    """Keyword match type values."""

    EXACT = "EXACT"
    PHRASE = "PHRASE"
    BROAD = "BROAD"
    UNKNOWN = "UNKNOWN"


MATCH_TYPE_CODES = {
    2: MatchType.EXACT,
    3: MatchType.PHRASE,
    4: MatchType.BROAD,
}


class QualityBucket(str, Enum):
    """Quality score component ratings."""

    BELOW_AVERAGE = "BELOW_AVERAGE"
    AVERAGE = "AVERAGE"
    ABOVE_AVERAGE = "ABOVE_AVERAGE"
    UNKNOWN = "UNKNOWN"


QUALITY_BUCKET_CODES = {
    2: QualityBucket.BELOW_AVERAGE,
    3: QualityBucket.AVERAGE,
    4: QualityBucket.ABOVE_AVERAGE,
}


class NegativeLevel(str, Enum):
    """Where a negative keyword is attached."""

    AD_GROUP = "AD_GROUP"
    CAMPAIGN = "CAMPAIGN"
    SHARED_LIST = "SHARED_LIST"
    UNKNOWN = "UNKNOWN"


def parse_match_type(value: Any) -> MatchType:
    """Parse a match type name or API code."""
    return coerce_enum(value, MatchType, MatchType.UNKNOWN, codes=MATCH_TYPE_CODES)


def _words(text: str) -> list[str]:
    return text.lower().split()


class Keyword(StatusMixin, PerformanceRecord):
    """Keyword with quality score components."""

    id: str = Field(default="", description="Keyword criterion ID")
    ad_group_id: str = Field(default="", description="Parent ad group ID")
    campaign_id: str = Field(default="", description="Parent campaign ID")
    text: str = Field(
        default="",
        validation_alias=AliasChoices("text", "keywordText", "keyword_text", "keyword"),
    )
    match_type: MatchType = Field(default=MatchType.UNKNOWN)

    # Quality metrics
    quality_score: int | None = Field(None, description="Quality score (1-10)")
    expected_ctr: QualityBucket = Field(default=QualityBucket.UNKNOWN)
    ad_relevance: QualityBucket = Field(default=QualityBucket.UNKNOWN)
    landing_page_experience: QualityBucket = Field(default=QualityBucket.UNKNOWN)

    @field_validator("id", "ad_group_id", "campaign_id", "text", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("match_type", mode="before")
    @classmethod
    def clean_match_type(cls, v: Any) -> MatchType:
        """Map match type names and API codes onto MatchType."""
        return parse_match_type(v)

    @field_validator(
        "expected_ctr", "ad_relevance", "landing_page_experience", mode="before"
    )
    @classmethod
    def clean_quality_bucket(cls, v: Any) -> QualityBucket:
        """Map component ratings and API codes onto QualityBucket."""
        return coerce_enum(
            v, QualityBucket, QualityBucket.UNKNOWN, codes=QUALITY_BUCKET_CODES
        )

    @field_validator("quality_score", mode="before")
    @classmethod
    def clean_quality_score(cls, v: Any) -> int | None:
        """Keep quality scores in 1..10, anything else becomes None."""
        cleaned = clean_numeric_value(v)
        if cleaned is None:
            return None
        score = int(round(cleaned))
        return score if 1 <= score <= 10 else None


class NegativeKeyword(BaseEntityModel):
    """Negative keyword attached to an ad group, campaign or shared list."""

    id: str = Field(default="", description="Criterion ID")
    ad_group_id: str = Field(default="", description="Ad group ID, if ad group level")
    campaign_id: str = Field(default="", description="Campaign ID, if campaign level")
    text: str = Field(
        default="",
        validation_alias=AliasChoices("text", "keywordText", "keyword_text", "keyword"),
    )
    match_type: MatchType = Field(default=MatchType.UNKNOWN)
    level: NegativeLevel = Field(default=NegativeLevel.UNKNOWN)

    @field_validator("id", "ad_group_id", "campaign_id", "text", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("match_type", mode="before")
    @classmethod
    def clean_match_type(cls, v: Any) -> MatchType:
        """Map match type names and API codes onto MatchType."""
        return parse_match_type(v)

    @field_validator("level", mode="before")
    @classmethod
    def clean_level(cls, v: Any) -> NegativeLevel:
        """Map level names onto NegativeLevel."""
        return coerce_enum(v, NegativeLevel, NegativeLevel.UNKNOWN)

    def model_post_init(self, __context: Any) -> None:
        """Infer the level from the attachment ids when it was not reported."""
        if self.level == NegativeLevel.UNKNOWN:
            if self.ad_group_id:
                self.level = NegativeLevel.AD_GROUP
            elif self.campaign_id:
                self.level = NegativeLevel.CAMPAIGN

    def blocks(self, query: str) -> bool:
        """Check whether this negative would block a search query.

        EXACT blocks only the identical query, PHRASE blocks queries that
        contain the negative's words as a contiguous sequence, and BROAD (or an
        unknown match type) blocks queries containing all of its words.

        Args:
            query: Search query text

        Returns:
            True if the query would be blocked
        """
        negative_words = _words(self.text)
        query_words = _words(query)
        if not negative_words or not query_words:
            return False

        if self.match_type == MatchType.EXACT:
            return negative_words == query_words
        if self.match_type == MatchType.PHRASE:
            size = len(negative_words)
            return any(
                query_words[i : i + size] == negative_words
                for i in range(len(query_words) - size + 1)
            )
        return set(negative_words).issubset(query_words)
