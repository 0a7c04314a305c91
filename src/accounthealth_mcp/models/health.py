"""Health check and health score report models."""

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

NEUTRAL_SCORE = 50.0


class HealthCategory(str, Enum):
    """The ten scored categories, in report order."""

    CONVERSION_TRACKING = "CONVERSION_TRACKING"
    QUALITY_SCORE = "QUALITY_SCORE"
    AD_STRENGTH = "AD_STRENGTH"
    IMPRESSION_SHARE = "IMPRESSION_SHARE"
    BUDGET_EFFICIENCY = "BUDGET_EFFICIENCY"
    STRUCTURE = "STRUCTURE"
    NEGATIVE_KEYWORDS = "NEGATIVE_KEYWORDS"
    MATCH_TYPE_BALANCE = "MATCH_TYPE_BALANCE"
    DEVICE_PERFORMANCE = "DEVICE_PERFORMANCE"
    MARKET_COMPETITION = "MARKET_COMPETITION"


CATEGORY_ORDER: tuple[HealthCategory, ...] = tuple(HealthCategory)

CATEGORY_NAMES: dict[HealthCategory, str] = {
    HealthCategory.CONVERSION_TRACKING: "Conversion Tracking",
    HealthCategory.QUALITY_SCORE: "Quality Score",
    HealthCategory.AD_STRENGTH: "Ad Strength",
    HealthCategory.IMPRESSION_SHARE: "Impression Share",
    HealthCategory.BUDGET_EFFICIENCY: "Budget Efficiency",
    HealthCategory.STRUCTURE: "Account Structure",
    HealthCategory.NEGATIVE_KEYWORDS: "Negative Keywords",
    HealthCategory.MATCH_TYPE_BALANCE: "Match Type Balance",
    HealthCategory.DEVICE_PERFORMANCE: "Device Performance",
    HealthCategory.MARKET_COMPETITION: "Market Competition",
}

# Conversion tracking dominates: without it every other signal is blind
DEFAULT_CATEGORY_WEIGHTS: dict[HealthCategory, float] = {
    HealthCategory.CONVERSION_TRACKING: 3.0,
    HealthCategory.QUALITY_SCORE: 2.5,
    HealthCategory.AD_STRENGTH: 1.5,
    HealthCategory.IMPRESSION_SHARE: 2.0,
    HealthCategory.BUDGET_EFFICIENCY: 2.0,
    HealthCategory.STRUCTURE: 1.5,
    HealthCategory.NEGATIVE_KEYWORDS: 1.5,
    HealthCategory.MATCH_TYPE_BALANCE: 1.5,
    HealthCategory.DEVICE_PERFORMANCE: 1.5,
    HealthCategory.MARKET_COMPETITION: 1.5,
}


class HealthStatus(str, Enum):
    """Status bands for a check score."""

    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    GOOD = "GOOD"
    EXCELLENT = "EXCELLENT"


# (exclusive lower bound, status), checked top down
STATUS_BANDS: tuple[tuple[float, HealthStatus], ...] = (
    (80.0, HealthStatus.EXCELLENT),
    (60.0, HealthStatus.GOOD),
    (40.0, HealthStatus.WARNING),
)

GRADE_BANDS: tuple[tuple[float, str], ...] = (
    (95.0, "A+"),
    (90.0, "A"),
    (85.0, "A-"),
    (80.0, "B+"),
    (75.0, "B"),
    (70.0, "B-"),
    (65.0, "C+"),
    (60.0, "C"),
    (55.0, "C-"),
    (50.0, "D+"),
    (45.0, "D"),
    (40.0, "D-"),
)


def status_for_score(score: float) -> HealthStatus:
    """Map a score to its status band.

    >80 EXCELLENT, >60 GOOD, >40 WARNING, otherwise CRITICAL.
    """
    for lower, status in STATUS_BANDS:
        if score > lower:
            return status
    return HealthStatus.CRITICAL


def grade_for_score(score: float) -> str:
    """Map an overall score to a letter grade (A+ down to F)."""
    for lower, grade in GRADE_BANDS:
        if score > lower:
            return grade
    return "F"


def clamp_score(value: Any) -> float:
    """Clamp to [0, 100] and round to 2 decimals; non-finite values become 0."""
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(score):
        return 0.0
    return round(min(100.0, max(0.0, score)), 2)


class HealthModel(BaseModel):
    """Base for report models, serialized camelCase for the dashboard."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthCheck(HealthModel):
    """One scored, explained category check."""

    category: HealthCategory
    name: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=100)
    finding: str = Field(..., min_length=1)
    recommendation: str = Field(..., min_length=1)
    weight: float = Field(default=1.0, ge=0)
    low_confidence: bool = Field(
        default=False, description="Scored from missing or insufficient data"
    )
    data_points: dict[str, Any] = Field(
        default_factory=dict, description="Raw evidence behind the score"
    )

    @field_validator("score", mode="before")
    @classmethod
    def clean_score(cls, v: Any) -> float:
        return clamp_score(v)

    @computed_field  # type: ignore[misc]
    @property
    def status(self) -> HealthStatus:
        """Status derived from the score band."""
        return status_for_score(self.score)


class HealthScoreReport(HealthModel):
    """Aggregated health report over all ten categories."""

    overall_score: float = Field(..., ge=0, le=100)
    overall_grade: str
    summary: str
    checks: list[HealthCheck] = Field(default_factory=list)
    top_issues: list[HealthCheck] = Field(default_factory=list)
    category_scores: dict[str, float] = Field(default_factory=dict)

    @field_validator("overall_score", mode="before")
    @classmethod
    def clean_overall_score(cls, v: Any) -> float:
        return clamp_score(v)

    def get_check(self, category: HealthCategory) -> HealthCheck | None:
        """Return the check for ``category`` if present."""
        for check in self.checks:
            if check.category == category:
                return check
        return None

    @property
    def all_low_confidence(self) -> bool:
        return bool(self.checks) and all(c.low_confidence for c in self.checks)
