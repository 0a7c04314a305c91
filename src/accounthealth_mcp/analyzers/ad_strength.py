"""Ad strength distribution evaluator, including asset health."""

from collections import defaultdict

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.ad import AdStrength
from accounthealth_mcp.models.asset import ApprovalStatus, AssetPerformanceLabel
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

STRENGTH_POINTS = {
    AdStrength.EXCELLENT: 100,
    AdStrength.GOOD: 75,
    AdStrength.AVERAGE: 50,
    AdStrength.POOR: 15,
}

# (poor share above, score cap)
POOR_SHARE_CAPS = ((40.0, 40.0), (20.0, 60.0))

DISAPPROVED_ASSET_PCT = 10.0
DISAPPROVED_ASSET_PENALTY = 15.0
POOR_ASSET_PCT = 30.0
POOR_ASSET_PENALTY = 10.0


class AdStrengthEvaluator(BaseHealthEvaluator):
    """Weighted ad strength mix, coverage per ad group and asset health."""

    category = HealthCategory.AD_STRENGTH
    required_sources = (DataSource.ADS,)
    no_data_recommendation = (
        "Ad Strength is only reported for responsive ads; make sure active ad "
        "groups run responsive search ads."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        restrict = bool(snapshot.ad_groups)
        ad_group_ids = snapshot.active_ad_group_ids()
        rated = [
            a
            for a in snapshot.ads
            if a.is_rated
            and a.is_active
            and (not restrict or a.ad_group_id in ad_group_ids)
        ]
        if not rated:
            return self.low_signal(
                f"{len(snapshot.ads)} ads returned but none active with an Ad "
                "Strength rating.",
                self.no_data_recommendation,
                {"totalAds": len(snapshot.ads), "ratedAds": 0},
            )

        counts = {strength: 0 for strength in STRENGTH_POINTS}
        for ad in rated:
            counts[ad.ad_strength] += 1
        total = len(rated)
        poor = counts[AdStrength.POOR]
        poor_pct = self._pct(poor, total)

        score = sum(STRENGTH_POINTS[s] * n for s, n in counts.items()) / total
        for threshold, cap in POOR_SHARE_CAPS:
            if poor_pct > threshold:
                score = min(score, cap)
                break

        strong_by_group: dict[str, bool] = defaultdict(bool)
        for ad in rated:
            strong_by_group[ad.ad_group_id] |= ad.ad_strength in (
                AdStrength.GOOD,
                AdStrength.EXCELLENT,
            )
        weak_groups = sum(1 for strong in strong_by_group.values() if not strong)

        finding = (
            f"{total} active ads rated: {counts[AdStrength.EXCELLENT]} Excellent, "
            f"{counts[AdStrength.GOOD]} Good, {counts[AdStrength.AVERAGE]} Average, "
            f"{poor} Poor ({poor_pct:.0f}% poor). "
            f"{weak_groups}/{len(strong_by_group)} ad groups have no Good or "
            "Excellent ad."
        )
        if poor > 0:
            recommendation = (
                f"Improve the {poor} POOR ads by adding more unique headlines (aim "
                "for 10+) and descriptions (4+), starting with the highest-spend "
                "ad groups."
            )
        elif weak_groups > 0:
            recommendation = (
                f"Add a stronger responsive ad to the {weak_groups} ad groups that "
                "lack a Good or Excellent ad."
            )
        else:
            recommendation = "Ad strength is healthy. Continue A/B testing headlines."

        data_points = {
            "excellent": counts[AdStrength.EXCELLENT],
            "good": counts[AdStrength.GOOD],
            "average": counts[AdStrength.AVERAGE],
            "poor": poor,
            "total": total,
            "adGroupsWithoutStrongAd": weak_groups,
        }

        score, finding, recommendation = self._apply_assets(
            snapshot, score, finding, recommendation, data_points
        )
        return self._check(score, finding, recommendation, data_points)

    def _apply_assets(
        self,
        snapshot: AccountSnapshot,
        score: float,
        finding: str,
        recommendation: str,
        data_points: dict,
    ) -> tuple[float, str, str]:
        """Penalize disapproved and poorly performing assets."""
        assets = snapshot.asset_performance
        if not assets:
            return score, finding, recommendation

        disapproved = sum(
            1 for a in assets if a.approval_status == ApprovalStatus.DISAPPROVED
        )
        poor = sum(
            1 for a in assets if a.performance_label == AssetPerformanceLabel.POOR
        )
        disapproved_pct = self._pct(disapproved, len(assets))
        poor_pct = self._pct(poor, len(assets))
        data_points["assets"] = {
            "total": len(assets),
            "disapproved": disapproved,
            "poor": poor,
        }

        finding += (
            f" Assets: {disapproved}/{len(assets)} disapproved, {poor} rated poor."
        )
        if disapproved_pct > DISAPPROVED_ASSET_PCT:
            score -= DISAPPROVED_ASSET_PENALTY
            recommendation += " Fix disapproved assets to avoid policy limits."
        if poor_pct > POOR_ASSET_PCT:
            score -= POOR_ASSET_PENALTY
            recommendation += " Replace poor-performing assets with new variations."
        return max(0.0, score), finding, recommendation
