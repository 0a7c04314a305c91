"""Asset performance data models."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from accounthealth_mcp.models.base import PerformanceRecord, clean_identity
from accounthealth_mcp.utils.parsing import clean_text, coerce_enum


class AssetPerformanceLabel(str, Enum):
    """Google's performance label for an asset."""

    BEST = "BEST"
    GOOD = "GOOD"
    POOR = "POOR"
    LEARNING = "LEARNING"
    PENDING = "PENDING"
    UNKNOWN = "UNKNOWN"


PERFORMANCE_LABEL_CODES = {
    2: AssetPerformanceLabel.PENDING,
    3: AssetPerformanceLabel.LEARNING,
    4: AssetPerformanceLabel.POOR,
    5: AssetPerformanceLabel.GOOD,
    6: AssetPerformanceLabel.BEST,
}

PERFORMANCE_LABEL_ALIASES = {
    "low": AssetPerformanceLabel.POOR,
    "excellent": AssetPerformanceLabel.BEST,
}


class ApprovalStatus(str, Enum):
    """Policy approval status for an asset."""

    APPROVED = "APPROVED"
    APPROVED_LIMITED = "APPROVED_LIMITED"
    DISAPPROVED = "DISAPPROVED"
    UNDER_REVIEW = "UNDER_REVIEW"
    UNKNOWN = "UNKNOWN"


APPROVAL_CODES = {
    2: ApprovalStatus.DISAPPROVED,
    3: ApprovalStatus.APPROVED_LIMITED,
    4: ApprovalStatus.APPROVED,
    5: ApprovalStatus.APPROVED_LIMITED,
}

APPROVAL_ALIASES = {
    # Enabled assets are served, so treat them as approved
    "enabled": ApprovalStatus.APPROVED,
    "area_of_interest_only": ApprovalStatus.APPROVED_LIMITED,
    "pending": ApprovalStatus.UNDER_REVIEW,
}


class AssetPerformance(PerformanceRecord):
    """Performance and policy state for one asset."""

    id: str = Field(default="", description="Asset ID")
    asset_type: str = Field(
        default="",
        validation_alias=AliasChoices("asset_type", "assetType", "type"),
    )
    field_type: str = Field(default="", description="e.g. HEADLINE, DESCRIPTION")
    performance_label: AssetPerformanceLabel = Field(
        default=AssetPerformanceLabel.UNKNOWN,
        validation_alias=AliasChoices(
            "performance_label", "performanceLabel", "performance"
        ),
    )
    approval_status: ApprovalStatus = Field(default=ApprovalStatus.UNKNOWN)

    @field_validator("id", mode="before")
    @classmethod
    def clean_identity_fields(cls, v: Any) -> str:
        """Clean identity fields."""
        return clean_identity(v)

    @field_validator("asset_type", "field_type", mode="before")
    @classmethod
    def clean_type_fields(cls, v: Any) -> str:
        return clean_text(v).upper()

    @field_validator("performance_label", mode="before")
    @classmethod
    def clean_performance_label(cls, v: Any) -> AssetPerformanceLabel:
        """Map label names and API codes onto AssetPerformanceLabel."""
        return coerce_enum(
            v,
            AssetPerformanceLabel,
            AssetPerformanceLabel.UNKNOWN,
            codes=PERFORMANCE_LABEL_CODES,
            aliases=PERFORMANCE_LABEL_ALIASES,
        )

    @field_validator("approval_status", mode="before")
    @classmethod
    def clean_approval_status(cls, v: Any) -> ApprovalStatus:
        """Map approval names and API codes onto ApprovalStatus."""
        return coerce_enum(
            v,
            ApprovalStatus,
            ApprovalStatus.UNKNOWN,
            codes=APPROVAL_CODES,
            aliases=APPROVAL_ALIASES,
        )
