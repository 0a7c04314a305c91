"""Account structure evaluator."""

from collections import Counter

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.base import EntityStatus
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, SourceState

BASELINE_SCORE = 90.0

MAX_ADS_PER_AD_GROUP = 3
BLOATED_AD_GROUP_PENALTY = 5.0
MAX_BLOATED_PENALTY = 30.0

EMPTY_AD_GROUP_PENALTY = 3.0
MAX_EMPTY_PENALTY = 20.0

MAX_AD_GROUPS_PER_CAMPAIGN = 20
OVERLOADED_CAMPAIGN_PENALTY = 10.0
MAX_OVERLOADED_PENALTY = 20.0

MAX_KEYWORDS_PER_AD_GROUP = 30
DENSE_AD_GROUP_PENALTY = 5.0
MAX_DENSE_PENALTY = 15.0

HIGH_CHANGE_VOLUME = 1000
CHANGE_ACTIVITY_PENALTY = 10.0

_LIVE = (EntityStatus.ENABLED, EntityStatus.UNKNOWN)


class StructureEvaluator(BaseHealthEvaluator):
    """Ad group and keyword density plus change-history activity."""

    category = HealthCategory.STRUCTURE
    required_sources = (DataSource.AD_GROUPS,)
    no_data_recommendation = (
        "Structure checks need the account's ad groups; confirm ad groups exist "
        "for the selected campaigns."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        groups = [ag for ag in snapshot.ad_groups if ag.status in _LIVE]
        if not groups:
            return self.low_signal(
                f"{len(snapshot.ad_groups)} ad groups returned but none enabled.",
                self.no_data_recommendation,
                {"totalAdGroups": len(snapshot.ad_groups), "enabledAdGroups": 0},
            )

        group_ids = {ag.id for ag in groups}
        ads_per_group = Counter(
            ad.ad_group_id
            for ad in snapshot.ads
            if ad.ad_group_id in group_ids and ad.status in _LIVE
        )
        keywords_per_group = Counter(
            k.ad_group_id
            for k in snapshot.keywords
            if k.ad_group_id in group_ids and k.status in _LIVE
        )
        groups_per_campaign = Counter(ag.campaign_id for ag in groups)

        bloated = sorted(
            count for count in ads_per_group.values() if count > MAX_ADS_PER_AD_GROUP
        )
        overloaded = [
            n for n in groups_per_campaign.values() if n > MAX_AD_GROUPS_PER_CAMPAIGN
        ]
        dense = [
            n for n in keywords_per_group.values() if n > MAX_KEYWORDS_PER_AD_GROUP
        ]
        # Without ad data an ad group cannot be called empty
        ads_known = snapshot.source_state(DataSource.ADS) == SourceState.AVAILABLE
        empty = (
            [ag for ag in groups if ads_per_group[ag.id] == 0] if ads_known else []
        )

        score = BASELINE_SCORE
        issues: list[str] = []
        if bloated:
            score -= min(MAX_BLOATED_PENALTY, len(bloated) * BLOATED_AD_GROUP_PENALTY)
            issues.append(
                f"{len(bloated)} ad groups with more than {MAX_ADS_PER_AD_GROUP} "
                f"enabled ads (worst: {bloated[-1]} ads)"
            )
        if empty:
            score -= min(MAX_EMPTY_PENALTY, len(empty) * EMPTY_AD_GROUP_PENALTY)
            issues.append(f"{len(empty)} enabled ad groups with 0 ads")
        if overloaded:
            score -= min(
                MAX_OVERLOADED_PENALTY, len(overloaded) * OVERLOADED_CAMPAIGN_PENALTY
            )
            issues.append(
                f"{len(overloaded)} campaigns with more than "
                f"{MAX_AD_GROUPS_PER_CAMPAIGN} ad groups (data fragmentation risk)"
            )
        if dense:
            score -= min(MAX_DENSE_PENALTY, len(dense) * DENSE_AD_GROUP_PENALTY)
            issues.append(
                f"{len(dense)} ad groups with more than {MAX_KEYWORDS_PER_AD_GROUP} "
                f"keywords (largest: {max(dense)})"
            )

        change_state = snapshot.source_state(DataSource.CHANGE_EVENTS)
        change_count = len(snapshot.change_events)
        if change_state == SourceState.EMPTY:
            score -= CHANGE_ACTIVITY_PENALTY
            issues.append(
                "no changes recorded in the period (account may be neglected)"
            )
        elif change_count > HIGH_CHANGE_VOLUME:
            score -= CHANGE_ACTIVITY_PENALTY
            issues.append(
                f"{change_count} changes in the period (possible automation churn)"
            )

        avg_ads = (
            sum(ads_per_group.values()) / len(ads_per_group) if ads_per_group else 0.0
        )
        summary = (
            f"{len(groups)} enabled ad groups across {len(groups_per_campaign)} "
            f"campaigns, {avg_ads:.1f} ads per ad group on average"
        )
        if change_state == SourceState.AVAILABLE:
            summary += f", {change_count} changes in the period"
        if issues:
            finding = f"{summary}. Issues: {'; '.join(issues)}."
        else:
            finding = f"{summary}. Structure is clean."

        if bloated:
            recommendation = (
                f"Keep 2-3 responsive ads per ad group. Consolidate or pause "
                f"low performers in the {len(bloated)} ad groups that exceed this."
            )
        elif empty:
            recommendation = (
                f"Add at least one responsive ad to the {len(empty)} empty ad "
                "groups or pause them."
            )
        elif overloaded or dense:
            recommendation = (
                "Split oversized campaigns and ad groups into tighter themes so "
                "each gathers enough data to optimize."
            )
        elif issues:
            recommendation = (
                "Review the change history and keep a steady weekly optimization "
                "cadence."
            )
        else:
            recommendation = "Structure looks good. No action needed."

        return self._check(
            score,
            finding,
            recommendation,
            {
                "enabledAdGroups": len(groups),
                "bloatedAdGroups": len(bloated),
                "emptyAdGroups": len(empty),
                "overloadedCampaigns": len(overloaded),
                "denseAdGroups": len(dense),
                "avgAdsPerAdGroup": round(avg_ads, 1),
                "changeEvents": change_count,
                "changeHistorySource": change_state.value,
            },
        )
