"""Budget efficiency (ROAS distribution) evaluator."""

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

# (blended ROAS at least, score)
ROAS_TIERS = ((5.0, 90.0), (3.0, 75.0), (1.5, 55.0))
ROAS_FLOOR_SCORE = 25.0
WASTE_PENALTY_FACTOR = 0.5  # points per % of spend on sub-1x campaigns

PROFITABLE_ROAS = 2.0
BUDGET_LIMITED_LOST_IS = 0.1
BUDGET_LIMITED_PENALTY = 5.0

PMAX_ZERO_CONVERSION_SPEND_PCT = 50.0
PMAX_ZERO_CONVERSION_PENALTY = 10.0


def roas_to_score(blended_roas: float) -> float:
    for floor, score in ROAS_TIERS:
        if blended_roas >= floor:
            return score
    return ROAS_FLOOR_SCORE


class BudgetEfficiencyEvaluator(BaseHealthEvaluator):
    """Blended ROAS, spend on unprofitable campaigns and budget constraints."""

    category = HealthCategory.BUDGET_EFFICIENCY
    required_sources = (DataSource.CAMPAIGNS,)
    no_data_recommendation = (
        "Budget efficiency needs campaigns with spend and conversion value in "
        "the selected period."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        spending = [c for c in snapshot.active_campaigns() if c.cost > 0]
        if not spending:
            return self.low_signal(
                f"none of {len(snapshot.campaigns)} campaigns recorded spend.",
                self.no_data_recommendation,
                {"totalCampaigns": len(snapshot.campaigns), "spendingCampaigns": 0},
            )

        total_cost = sum(c.cost for c in spending)
        total_value = sum(c.conversion_value for c in spending)
        total_conversions = sum(c.conversions for c in spending)
        if total_value == 0 and total_conversions > 0:
            return self.low_signal(
                f"{total_conversions:.0f} conversions on "
                f"{self._format_currency(total_cost)} spend but no conversion value "
                "tracked, so ROAS cannot be assessed.",
                "Assign values to conversion actions so budget efficiency can be "
                "measured by return on ad spend.",
                {"totalCost": round(total_cost, 2), "conversions": total_conversions},
            )

        blended_roas = total_value / total_cost
        profitable = [c for c in spending if c.roas >= PROFITABLE_ROAS]
        wasteful = sorted(
            (c for c in spending if c.roas < 1), key=lambda c: (-c.cost, c.name)
        )
        wasteful_spend = sum(c.cost for c in wasteful)
        wasteful_pct = self._pct(wasteful_spend, total_cost)

        score = roas_to_score(blended_roas) - wasteful_pct * WASTE_PENALTY_FACTOR
        finding = (
            f"Blended ROAS {blended_roas:.2f}x on {self._format_currency(total_cost)}"
            f" spend. {len(profitable)}/{len(spending)} campaigns above "
            f"{PROFITABLE_ROAS:.0f}x; {wasteful_pct:.0f}% of spend on sub-1x "
            "campaigns."
        )
        if wasteful:
            names = ", ".join(f'"{c.name or c.id}"' for c in wasteful[:3])
            recommendation = (
                f"{len(wasteful)} campaigns return below 1x ROAS, consuming "
                f"{self._format_currency(wasteful_spend)} ({wasteful_pct:.0f}% of "
                f"spend). Review or pause: {names}."
            )
        else:
            recommendation = (
                "All spending campaigns return at least 1x. Shift budget from the "
                "lowest-ROAS campaigns toward the highest."
            )

        limited = [
            c
            for c in profitable
            if (c.search_lost_is_budget or 0.0) > BUDGET_LIMITED_LOST_IS
        ]
        if limited:
            score -= BUDGET_LIMITED_PENALTY
            top = max(limited, key=lambda c: (c.conversions, c.name))
            finding += (
                f" {len(limited)} profitable campaigns are limited by budget "
                f"(top: \"{top.name or top.id}\" loses "
                f"{(top.search_lost_is_budget or 0.0) * 100:.0f}% impression share)."
            )
            recommendation += (
                " Move budget into profitable campaigns that are losing impression "
                "share to budget."
            )

        data_points = {
            "blendedROAS": round(blended_roas, 2),
            "profitableCampaigns": len(profitable),
            "wastefulCampaigns": len(wasteful),
            "wastefulSpend": round(wasteful_spend, 2),
            "wastefulPct": round(wasteful_pct, 1),
            "budgetLimitedProfitable": len(limited),
            "totalCost": round(total_cost, 2),
        }

        products = snapshot.pmax_products
        if products:
            product_spend = sum(p.cost for p in products)
            dead_spend = sum(p.cost for p in products if p.conversions == 0)
            dead_pct = self._pct(dead_spend, product_spend)
            data_points["pmaxProducts"] = {
                "total": len(products),
                "zeroImpressions": sum(1 for p in products if p.impressions == 0),
                "zeroConversionSpendPct": round(dead_pct, 1),
            }
            if dead_pct > PMAX_ZERO_CONVERSION_SPEND_PCT:
                score -= PMAX_ZERO_CONVERSION_PENALTY
                finding += (
                    f" {dead_pct:.0f}% of Performance Max product spend went to "
                    "products with 0 conversions."
                )
                recommendation += (
                    " Split non-converting products into a separate listing group "
                    "with a lower ROAS target."
                )

        return self._check(max(0.0, score), finding, recommendation, data_points)
