"""Combine category checks into one health score report."""

import logging
from collections.abc import Mapping

from accounthealth_mcp.models.health import (
    CATEGORY_ORDER,
    DEFAULT_CATEGORY_WEIGHTS,
    NEUTRAL_SCORE,
    HealthCategory,
    HealthCheck,
    HealthScoreReport,
    HealthStatus,
    clamp_score,
    grade_for_score,
)

logger = logging.getLogger(__name__)

MAX_TOP_ISSUES = 3

INSUFFICIENT_DATA_SUMMARY = (
    "Not enough data for the selected period to score the account. Every "
    "category was scored neutrally with low confidence."
)


def _order(check: HealthCheck) -> int:
    return CATEGORY_ORDER.index(check.category)


def _weighted_score(
    checks: list[HealthCheck], weights: Mapping[HealthCategory, float]
) -> float:
    total_weight = 0.0
    weighted_sum = 0.0
    for check in checks:
        weight = weights.get(check.category, check.weight)
        total_weight += weight
        weighted_sum += check.score * weight
    if total_weight <= 0:
        return NEUTRAL_SCORE
    return weighted_sum / total_weight


def _build_summary(
    overall: float, grade: str, checks: list[HealthCheck], top: list[HealthCheck]
) -> str:
    if not checks or all(c.low_confidence for c in checks):
        return INSUFFICIENT_DATA_SUMMARY

    parts = [f"Account health: {overall:.1f}/100 ({grade})."]
    critical = [c for c in top if c.status == HealthStatus.CRITICAL]
    if critical:
        names = ", ".join(c.name for c in critical)
        parts.append(
            f"{len(critical)} critical issue(s) requiring immediate attention: "
            f"{names}."
        )
    else:
        improvable = [c for c in top if c.status == HealthStatus.WARNING]
        if improvable:
            names = ", ".join(c.name for c in improvable)
            parts.append(f"{len(improvable)} area(s) to improve: {names}.")
        else:
            parts.append("All scored checks passed; account is in good shape.")

    unscored = [c.name for c in checks if c.low_confidence]
    if unscored:
        parts.append(f"Low confidence (insufficient data): {', '.join(unscored)}.")
    return " ".join(parts)


def aggregate_report(
    checks: list[HealthCheck],
    weights: Mapping[HealthCategory, float] | None = None,
) -> HealthScoreReport:
    """Aggregate category checks into a graded report.

    Args:
        checks: One check per category, in any order
        weights: Category weights; defaults to DEFAULT_CATEGORY_WEIGHTS, and a
            category missing from the mapping falls back to the check's weight

    Returns:
        Report with checks in category order, the weighted overall score, the
        letter grade, the worst scored checks and a summary
    """
    weights = DEFAULT_CATEGORY_WEIGHTS if weights is None else weights
    ordered = sorted(checks, key=_order)

    overall = clamp_score(_weighted_score(ordered, weights))
    grade = grade_for_score(overall)

    # Low-confidence checks are neutral placeholders, never issues
    scored = [c for c in ordered if not c.low_confidence]
    top_issues = sorted(scored, key=lambda c: (c.score, _order(c)))[:MAX_TOP_ISSUES]

    summary = _build_summary(overall, grade, ordered, top_issues)
    logger.debug(
        f"Aggregated {len(ordered)} checks: overall {overall:.2f} ({grade}), "
        f"{len(ordered) - len(scored)} low confidence"
    )
    return HealthScoreReport(
        overall_score=overall,
        overall_grade=grade,
        summary=summary,
        checks=ordered,
        top_issues=top_issues,
        category_scores={c.category.value: c.score for c in ordered},
    )
