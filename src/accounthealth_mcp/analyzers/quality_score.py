"""Quality Score distribution evaluator."""

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.keyword import QualityBucket
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

LOW_QS_THRESHOLD = 5
HIGH_QS_THRESHOLD = 7
LOW_QS_SHARE_CAP_PCT = 30.0
LOW_QS_SHARE_CAP = 60.0

COMPONENT_ADVICE = {
    "Expected CTR": "Test new ad copy to improve click-through rate.",
    "Landing Page Experience": "Audit landing page speed and relevance.",
    "Ad Relevance": "Tighten keyword-to-ad copy alignment.",
}


def qs_to_score(weighted_qs: float) -> float:
    """Piecewise map of an average QS (1-10) onto 0-100.

    >=7 scores 90-100, 5-7 scores 50-90, below 5 scores QS*10 (min 10).
    """
    if weighted_qs >= HIGH_QS_THRESHOLD:
        return 90 + min(10.0, (weighted_qs - HIGH_QS_THRESHOLD) * 3.3)
    if weighted_qs >= LOW_QS_THRESHOLD:
        return 50 + (weighted_qs - LOW_QS_THRESHOLD) * 20
    return max(10.0, weighted_qs * 10)


class QualityScoreEvaluator(BaseHealthEvaluator):
    """Impression-weighted Quality Score with its weakest component."""

    category = HealthCategory.QUALITY_SCORE
    required_sources = (DataSource.KEYWORDS,)
    no_data_recommendation = (
        "Ensure search campaigns have active keywords with impressions so Google "
        "reports Quality Score."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        scored = [k for k in snapshot.active_keywords() if k.quality_score is not None]
        if not scored:
            return self.low_signal(
                f"{len(snapshot.keywords)} keywords returned but none active with a "
                "reported Quality Score.",
                self.no_data_recommendation,
                {"totalKeywords": len(snapshot.keywords), "keywordsWithQS": 0},
            )

        total = len(scored)
        low = sum(1 for k in scored if k.quality_score < LOW_QS_THRESHOLD)
        high = sum(1 for k in scored if k.quality_score >= HIGH_QS_THRESHOLD)
        mid = total - low - high
        avg_qs = sum(k.quality_score for k in scored) / total

        impressions = sum(k.impressions for k in scored)
        if impressions > 0:
            weighted_sum = sum(k.quality_score * k.impressions for k in scored)
            weighted_qs = weighted_sum / impressions
        else:
            weighted_qs = avg_qs

        low_pct = self._pct(low, total)
        score = qs_to_score(weighted_qs)
        if low_pct > LOW_QS_SHARE_CAP_PCT:
            score = min(score, LOW_QS_SHARE_CAP)

        below_average = {
            "Expected CTR": sum(
                1 for k in scored if k.expected_ctr == QualityBucket.BELOW_AVERAGE
            ),
            "Landing Page Experience": sum(
                1
                for k in scored
                if k.landing_page_experience == QualityBucket.BELOW_AVERAGE
            ),
            "Ad Relevance": sum(
                1 for k in scored if k.ad_relevance == QualityBucket.BELOW_AVERAGE
            ),
        }
        # Ties resolve in dict order
        worst_component = max(below_average, key=lambda name: below_average[name])
        if below_average[worst_component] == 0:
            worst_text = "no component rated below average"
        else:
            worst_text = (
                f"weakest component {worst_component} "
                f"({below_average[worst_component]} keywords below average)"
            )

        finding = (
            f"Impression-weighted average QS {weighted_qs:.1f}/10 across {total} "
            f"keywords; {low} below {LOW_QS_THRESHOLD} ({low_pct:.0f}%); "
            f"{worst_text}."
        )
        if score < 60 and below_average[worst_component] > 0:
            recommendation = (
                f"Focus on improving {worst_component}. "
                f"{COMPONENT_ADVICE[worst_component]}"
            )
        elif score < 60:
            recommendation = (
                "Raise Quality Score by tightening ad groups around closely related "
                "keywords and matching ad copy and landing pages to them."
            )
        else:
            recommendation = (
                f"QS is healthy overall. Monitor the {low} low-QS keywords and pause "
                "those that also convert poorly."
            )

        return self._check(
            score,
            finding,
            recommendation,
            {
                "avgQS": round(avg_qs, 1),
                "weightedAvgQS": round(weighted_qs, 1),
                "distribution": {"low": low, "mid": mid, "high": high},
                "keywordsWithQS": total,
                "lowQSPct": round(low_pct, 1),
                "worstComponent": worst_component,
                "belowAverageCounts": below_average,
            },
        )
