"""Negative keyword coverage evaluator."""

from collections import defaultdict
from typing import Iterable

from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.models.health import HealthCategory, HealthCheck
from accounthealth_mcp.models.keyword import MatchType, NegativeKeyword, NegativeLevel
from accounthealth_mcp.models.search_term import SearchTerm
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, SourceState

# (negatives per keyword below, score)
RATIO_TIERS = ((0.3, 40.0), (0.7, 65.0))
WELL_COVERED_SCORE = 90.0
NO_NEGATIVES_SCORE = 15.0
NO_KEYWORDS_WITH_NEGATIVES_SCORE = 65.0

# (waste % above, points off, floor)
WASTE_TIERS = ((40.0, 25.0, 10.0), (25.0, 15.0, 20.0))

TOP_UNCOVERED = 3


class NegativeIndex:
    """Lookup of negatives that could block a query.

    Exact negatives are keyed by their full text; phrase and broad negatives by
    their first word, which every matching query must contain. Checking a query
    only touches negatives sharing one of its words.
    """

    def __init__(self, negatives: Iterable[NegativeKeyword]):
        self._exact: dict[str, list[NegativeKeyword]] = defaultdict(list)
        self._by_word: dict[str, list[NegativeKeyword]] = defaultdict(list)
        self.size = 0
        for negative in negatives:
            words = negative.text.lower().split()
            if not words:
                continue
            self.size += 1
            if negative.match_type == MatchType.EXACT:
                self._exact[" ".join(words)].append(negative)
            else:
                self._by_word[words[0]].append(negative)

    def candidates(self, query: str) -> Iterable[NegativeKeyword]:
        words = query.lower().split()
        yield from self._exact.get(" ".join(words), ())
        for word in dict.fromkeys(words):
            yield from self._by_word.get(word, ())

    def blocks(
        self, query: str, campaign_id: str = "", ad_group_id: str = ""
    ) -> bool:
        """Whether any negative in scope for the given ids blocks ``query``.

        Shared-list and unattached negatives apply everywhere; campaign and ad
        group negatives apply only when the ids match.
        """
        for negative in self.candidates(query):
            if not _in_scope(negative, campaign_id, ad_group_id):
                continue
            if negative.blocks(query):
                return True
        return False

    def covers(self, query: str) -> bool:
        """Whether a negative at any level blocks ``query``."""
        return any(negative.blocks(query) for negative in self.candidates(query))


def _in_scope(negative: NegativeKeyword, campaign_id: str, ad_group_id: str) -> bool:
    if negative.level == NegativeLevel.AD_GROUP:
        return bool(ad_group_id) and negative.ad_group_id == ad_group_id
    if negative.level == NegativeLevel.CAMPAIGN:
        return bool(campaign_id) and negative.campaign_id == campaign_id
    return True


def _is_waste(term: SearchTerm) -> bool:
    return term.conversions == 0 and term.cost > 0


class NegativeKeywordEvaluator(BaseHealthEvaluator):
    """Negative coverage relative to keywords, and spend on non-converting terms."""

    category = HealthCategory.NEGATIVE_KEYWORDS
    no_data_recommendation = (
        "Negative keyword coverage needs keywords, negative keywords or search "
        "terms for the selected period."
    )

    _sources = (
        DataSource.KEYWORDS,
        DataSource.NEGATIVE_KEYWORDS,
        DataSource.SEARCH_TERMS,
    )

    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        if all(
            snapshot.source_state(s) != SourceState.AVAILABLE for s in self._sources
        ):
            return self.insufficient_data(snapshot, self._sources)

        # A failed fetch of either side of the ratio must not read as zero
        failed = [
            s
            for s in (DataSource.KEYWORDS, DataSource.NEGATIVE_KEYWORDS)
            if snapshot.source_state(s) == SourceState.UNAVAILABLE
        ]
        if failed:
            return self.insufficient_data(
                snapshot, failed, detail="Negative coverage was not scored."
            )

        keyword_count = len(snapshot.active_keywords())
        negatives = snapshot.negative_keywords
        negative_count = len(negatives)

        if keyword_count == 0:
            score = (
                NO_NEGATIVES_SCORE
                if negative_count == 0
                else NO_KEYWORDS_WITH_NEGATIVES_SCORE
            )
            ratio = None
        else:
            ratio = negative_count / keyword_count
            score = self._ratio_score(negative_count, ratio)

        terms = snapshot.search_terms
        total_spend = sum(t.cost for t in terms)
        waste = [t for t in terms if _is_waste(t)]
        waste_spend = sum(t.cost for t in waste)
        waste_pct = self._pct(waste_spend, total_spend)
        for threshold, penalty, floor in WASTE_TIERS:
            if waste_pct > threshold:
                score = max(floor, score - penalty)
                break

        index = NegativeIndex(negatives)
        uncovered = [
            t
            for t in waste
            if not index.blocks(t.search_term, t.campaign_id, t.ad_group_id)
        ]
        uncovered.sort(key=lambda t: (-t.cost, t.search_term.lower()))
        uncovered_spend = sum(t.cost for t in uncovered)

        if ratio is None:
            finding = f"{negative_count} negative keywords and no active keywords."
        else:
            finding = (
                f"{negative_count} negative keywords for {keyword_count} active "
                f"keywords (ratio {ratio:.2f})."
            )
        if terms:
            finding += (
                f" {waste_pct:.0f}% of search term spend "
                f"({self._format_currency(waste_spend)}) went to terms with 0 "
                f"conversions; {len(uncovered)} of those terms are not blocked by "
                "any negative."
            )
        else:
            missing = snapshot.describe_missing(DataSource.SEARCH_TERMS)
            finding += f" {missing[:1].upper()}{missing[1:]}."

        if uncovered:
            examples = ", ".join(
                f'"{t.search_term}"' for t in uncovered[:TOP_UNCOVERED]
            )
            recommendation = (
                f"Add negatives for non-converting search terms costing "
                f"{self._format_currency(uncovered_spend)}, starting with "
                f"{examples}."
            )
        elif negative_count == 0:
            recommendation = (
                "Build a negative keyword list from the search terms report and "
                "attach it to every Search campaign."
            )
        elif score < WELL_COVERED_SCORE:
            recommendation = (
                "Review the search terms report weekly and keep expanding negative "
                "coverage as new irrelevant queries appear."
            )
        else:
            recommendation = "Negative coverage looks good. Keep the weekly review."

        return self._check(
            score,
            finding,
            recommendation,
            {
                "activeKeywords": keyword_count,
                "negativeKeywords": negative_count,
                "ratio": round(ratio, 2) if ratio is not None else None,
                "searchTerms": len(terms),
                "wasteSpend": round(waste_spend, 2),
                "wastePct": round(waste_pct, 1),
                "uncoveredWasteTerms": len(uncovered),
                "uncoveredWasteSpend": round(uncovered_spend, 2),
            },
        )

    @staticmethod
    def _ratio_score(negative_count: int, ratio: float) -> float:
        if negative_count == 0:
            return NO_NEGATIVES_SCORE
        for ceiling, score in RATIO_TIERS:
            if ratio < ceiling:
                return score
        return WELL_COVERED_SCORE
