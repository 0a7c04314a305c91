"""Conversion tracking health evaluator.

Scores how much of the active campaign set records conversions, adjusted by
the configuration of the account's conversion actions.
"""

import logging

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, SourceState

logger = logging.getLogger(__name__)

# Coverage tiers
NO_CONVERSIONS_SCORE = 0.0
LOW_COVERAGE_SCORE = 30.0  # < 50% of active campaigns convert
PARTIAL_COVERAGE_SCORE = 60.0  # < 80% of active campaigns convert
LOW_VOLUME_SCORE = 70.0  # full coverage, < 30 conversions
HEALTHY_SCORE = 95.0

LOW_COVERAGE_PCT = 50.0
PARTIAL_COVERAGE_PCT = 80.0
MIN_SMART_BIDDING_CONVERSIONS = 30

# Conversion action adjustments
NO_PRIMARY_ACTION_CAP = 20.0
ZERO_CONVERSION_ACTION_PENALTY = 10.0
MAX_ZERO_CONVERSION_PENALTY = 20.0


class ConversionTrackingEvaluator(BaseHealthEvaluator):
    """Check that conversions are tracked across active campaigns."""

    category = HealthCategory.CONVERSION_TRACKING
    required_sources = (DataSource.CAMPAIGNS,)
    no_data_recommendation = (
        "Confirm campaigns were active in the selected period before judging "
        "conversion tracking."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        active = snapshot.active_campaigns()
        if not active:
            return self.low_signal(
                f"{len(snapshot.campaigns)} campaigns returned but none is enabled "
                "or served impressions.",
                self.no_data_recommendation,
                {"totalCampaigns": len(snapshot.campaigns), "activeCampaigns": 0},
            )

        total_conversions = sum(c.conversions for c in active)
        converting = sum(1 for c in active if c.conversions > 0)
        coverage_pct = self._pct(converting, len(active))

        if total_conversions == 0:
            score = NO_CONVERSIONS_SCORE
            finding = (
                f"No conversions tracked across any of {len(active)} active "
                "campaigns. All optimization signals are blind."
            )
            recommendation = (
                "Implement conversion tracking immediately. Without it Smart "
                "Bidding and performance analysis have nothing to optimize toward."
            )
        elif coverage_pct < LOW_COVERAGE_PCT:
            score = LOW_COVERAGE_SCORE
            finding = (
                f"Only {converting}/{len(active)} campaigns ({coverage_pct:.0f}%) "
                "have conversions. Significant blind spots."
            )
            recommendation = (
                "Check conversion actions in campaigns with 0 conversions for "
                "missing tags or a wrong attribution window."
            )
        elif coverage_pct < PARTIAL_COVERAGE_PCT:
            score = PARTIAL_COVERAGE_SCORE
            finding = (
                f"{converting}/{len(active)} campaigns ({coverage_pct:.0f}%) "
                "tracking conversions. Some gaps remain."
            )
            recommendation = (
                "Audit non-converting campaigns to separate tracking issues from "
                "genuinely low performance."
            )
        elif total_conversions < MIN_SMART_BIDDING_CONVERSIONS:
            score = LOW_VOLUME_SCORE
            finding = (
                f"Conversion tracking active but only {total_conversions:.0f} total "
                "conversions, too few for Smart Bidding optimization."
            )
            recommendation = (
                "Add micro-conversions (add-to-cart, begin checkout) to raise "
                "signal volume. Smart Bidding needs 30+ conversions per month."
            )
        else:
            score = HEALTHY_SCORE
            finding = (
                f"{total_conversions:.0f} conversions across {converting} "
                "campaigns. Strong signal."
            )
            recommendation = (
                "Conversion tracking is healthy. Audit the conversion action mix "
                "periodically for accuracy."
            )

        data_points = {
            "totalConversions": round(total_conversions, 2),
            "campaignsWithConversions": converting,
            "activeCampaigns": len(active),
            "coveragePct": round(coverage_pct, 1),
        }

        score, finding, recommendation = self._apply_conversion_actions(
            snapshot, score, finding, recommendation, data_points
        )
        return self._check(score, finding, recommendation, data_points)

    def _apply_conversion_actions(
        self,
        snapshot: AccountSnapshot,
        score: float,
        finding: str,
        recommendation: str,
        data_points: dict,
    ) -> tuple[float, str, str]:
        """Adjust the coverage score using conversion action configuration."""
        state = snapshot.source_state(DataSource.CONVERSION_ACTIONS)
        data_points["conversionActionsSource"] = state.value
        if state != SourceState.AVAILABLE:
            return score, finding, recommendation

        actions = snapshot.conversion_actions
        primary = [a for a in actions if a.is_primary]
        zero_primary = sorted(a.name or a.id for a in primary if a.all_conversions == 0)
        data_points["conversionActions"] = len(actions)
        data_points["primaryActions"] = len(primary)
        data_points["zeroConversionPrimaryActions"] = zero_primary[:3]

        if not primary:
            score = min(score, NO_PRIMARY_ACTION_CAP)
            finding += (
                f" None of the {len(actions)} conversion actions is an enabled "
                "primary action."
            )
            recommendation = (
                "Mark at least one enabled conversion action as primary "
                "(included in Conversions). " + recommendation
            )
        elif zero_primary:
            penalty = min(
                MAX_ZERO_CONVERSION_PENALTY,
                ZERO_CONVERSION_ACTION_PENALTY * len(zero_primary),
            )
            score = max(0.0, score - penalty)
            finding += (
                f" {len(zero_primary)}/{len(primary)} primary conversion actions "
                f"recorded 0 conversions ({', '.join(zero_primary[:3])})."
            )
            recommendation += (
                f" Investigate the {len(zero_primary)} primary actions with 0 "
                "reported conversions for broken tags."
            )
        else:
            finding += f" {len(primary)} primary conversion actions all recording."

        logger.debug(
            f"Conversion actions: {len(primary)} primary, {len(zero_primary)} silent"
        )
        return score, finding, recommendation
