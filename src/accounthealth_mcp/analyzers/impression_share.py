"""Search impression share evaluator."""

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.campaign import Campaign, ChannelType
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

# Slight bonus for high share: 83.3% IS already scores 100
IS_SCORE_MULTIPLIER = 120


def _weighted(campaigns: list[Campaign], attr: str) -> float:
    """Cost-weighted mean of a ratio field, plain mean when nothing spent."""
    total_cost = sum(c.cost for c in campaigns)
    values = [(getattr(c, attr) or 0.0, c.cost) for c in campaigns]
    if total_cost > 0:
        return sum(value * cost for value, cost in values) / total_cost
    return sum(value for value, _ in values) / len(values)


class ImpressionShareEvaluator(BaseHealthEvaluator):
    """Cost-weighted search impression share and its main loss driver."""

    category = HealthCategory.IMPRESSION_SHARE
    required_sources = (DataSource.CAMPAIGNS,)
    no_data_recommendation = (
        "Impression share is reported for Search campaigns only; check that "
        "Search campaigns served impressions in the selected period."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        # Channel is often omitted upstream; a reported share implies Search
        reporting = [
            c
            for c in snapshot.active_campaigns()
            if c.channel_type in (ChannelType.SEARCH, ChannelType.UNKNOWN)
            and c.search_impression_share is not None
        ]
        if not reporting:
            return self.low_signal(
                f"none of {len(snapshot.campaigns)} campaigns is an active Search "
                "campaign reporting impression share.",
                self.no_data_recommendation,
                {"totalCampaigns": len(snapshot.campaigns), "campaignsAnalyzed": 0},
            )

        weighted_is = _weighted(reporting, "search_impression_share")
        budget_lost = _weighted(reporting, "search_lost_is_budget")
        rank_lost = _weighted(reporting, "search_lost_is_rank")

        score = min(100.0, weighted_is * IS_SCORE_MULTIPLIER)
        primary_loss = "budget" if budget_lost > rank_lost else "rank"
        primary_lost = budget_lost if primary_loss == "budget" else rank_lost

        finding = (
            f"Cost-weighted Search impression share {weighted_is * 100:.1f}% across "
            f"{len(reporting)} campaigns. Lost to budget {budget_lost * 100:.1f}%, "
            f"lost to rank {rank_lost * 100:.1f}% (primary driver: {primary_loss})."
        )
        if primary_lost == 0:
            recommendation = (
                "No measurable impression share loss. Hold bids and budgets and "
                "watch for new competitors."
            )
        elif primary_loss == "budget":
            recommendation = (
                f"Primary loss is budget ({primary_lost * 100:.1f}%). Raise daily "
                "budgets on high-ROAS campaigns or narrow targeting."
            )
        else:
            recommendation = (
                f"Primary loss is Ad Rank ({primary_lost * 100:.1f}%). Improve "
                "Quality Score and/or raise bids on high-converting campaigns."
            )

        return self._check(
            score,
            finding,
            recommendation,
            {
                "weightedIS": round(weighted_is * 100, 1),
                "budgetLost": round(budget_lost * 100, 1),
                "rankLost": round(rank_lost * 100, 1),
                "primaryLoss": primary_loss,
                "campaignsAnalyzed": len(reporting),
            },
        )
