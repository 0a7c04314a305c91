"""Auction insights (market competition) evaluator."""

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

NO_COMPETITORS_SCORE = 95.0
# (outranking below, overlap above, score), checked top down
PRESSURE_TIERS = ((0.2, 0.2, 35.0), (0.5, 0.3, 55.0))
COMPETITIVE_SCORE = 85.0


class MarketCompetitionEvaluator(BaseHealthEvaluator):
    """How the account holds up against its most frequent auction competitor."""

    category = HealthCategory.MARKET_COMPETITION
    required_sources = (DataSource.AUCTION_INSIGHTS,)
    no_data_recommendation = (
        "Auction insights are reported for Search campaigns with enough "
        "impressions; widen the date range to get competitor data."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        rows = [r for r in snapshot.auction_insights if r.is_competitor]
        if not rows:
            return self._check(
                NO_COMPETITORS_SCORE,
                f"No competitors in {len(snapshot.auction_insights)} auction "
                "insight rows.",
                "No competing advertisers reported. Monitor auction insights as "
                "volume grows.",
                {"competitors": 0, "rows": len(snapshot.auction_insights)},
            )

        top = min(rows, key=lambda r: (-(r.overlap_rate or 0.0), r.competitor.lower()))
        overlap = top.overlap_rate or 0.0
        outranking = top.outranking_share or 0.0
        competitors = len({r.competitor.lower() for r in rows})

        score = COMPETITIVE_SCORE
        for max_outranking, min_overlap, tier_score in PRESSURE_TIERS:
            if outranking < max_outranking and overlap > min_overlap:
                score = tier_score
                break

        finding = (
            f"Top competitor {top.competitor} overlaps in {overlap * 100:.0f}% of "
            f"auctions; you outrank them {outranking * 100:.0f}% of the time "
            f"({competitors} competitors seen)."
        )
        if score < COMPETITIVE_SCORE:
            recommendation = (
                f"{top.competitor} is winning shared auctions. Improve Ad Rank on "
                "overlapping keywords through Quality Score and bids, or "
                "differentiate the ad copy."
            )
        else:
            recommendation = (
                "Competitive position is solid. Keep monitoring auction insights "
                f"for changes in {top.competitor}'s overlap."
            )

        return self._check(
            score,
            finding,
            recommendation,
            {
                "competitors": competitors,
                "topCompetitor": top.competitor,
                "overlapRate": round(overlap * 100, 1),
                "outrankingShare": round(outranking * 100, 1),
                "impressionShare": (
                    round(top.impression_share * 100, 1)
                    if top.impression_share is not None
                    else None
                ),
            },
        )
