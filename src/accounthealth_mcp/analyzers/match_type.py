"""Match type balance evaluator."""

from collections import Counter

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.keyword import MatchType
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource

BROAD_HEAVY_PCT = 70.0
EXACT_HEAVY_PCT = 80.0
BALANCED_BROAD_RANGE = (20.0, 50.0)
BALANCED_MIN_EXACT_PCT = 20.0


class MatchTypeEvaluator(BaseHealthEvaluator):
    """Distribution of active keywords across broad, phrase and exact."""

    category = HealthCategory.MATCH_TYPE_BALANCE
    required_sources = (DataSource.KEYWORDS,)
    no_data_recommendation = (
        "Match type balance needs active keywords with a reported match type."
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if self.missing_required(snapshot):
            return self.insufficient_data(snapshot, self.required_sources)

        keywords = [
            k for k in snapshot.active_keywords() if k.match_type != MatchType.UNKNOWN
        ]
        if not keywords:
            return self.low_signal(
                f"none of {len(snapshot.keywords)} keywords is active with a known "
                "match type.",
                self.no_data_recommendation,
                {"totalKeywords": len(snapshot.keywords), "keywordsAnalyzed": 0},
            )

        counts = Counter(k.match_type for k in keywords)
        total = len(keywords)
        broad = self._pct(counts[MatchType.BROAD], total)
        phrase = self._pct(counts[MatchType.PHRASE], total)
        exact = self._pct(counts[MatchType.EXACT], total)

        low, high = BALANCED_BROAD_RANGE
        if broad > BROAD_HEAVY_PCT:
            score = 35.0
            recommendation = (
                f"{broad:.0f}% broad match invites irrelevant traffic. Move proven "
                "converters to phrase or exact and pair broad with smart bidding "
                "and strong negatives."
            )
        elif exact > EXACT_HEAVY_PCT:
            score = 55.0
            recommendation = (
                f"{exact:.0f}% exact match limits reach. Test phrase or broad "
                "versions of top converters to discover new queries."
            )
        elif low <= broad <= high and exact >= BALANCED_MIN_EXACT_PCT:
            score = 90.0
            recommendation = "Match type mix is balanced. No action needed."
        else:
            score = 70.0
            recommendation = (
                "Aim for roughly 20-50% broad with at least 20% exact, keeping "
                "exact for proven converters."
            )

        finding = (
            f"{total} active keywords: {broad:.0f}% broad, {phrase:.0f}% phrase, "
            f"{exact:.0f}% exact."
        )
        return self._check(
            score,
            finding,
            recommendation,
            {
                "keywordsAnalyzed": total,
                "broadPct": round(broad, 1),
                "phrasePct": round(phrase, 1),
                "exactPct": round(exact, 1),
            },
        )
