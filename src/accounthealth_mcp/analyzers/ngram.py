"""N-gram mining over search terms.

Splits every search term into 1, 2 and 3 word grams and aggregates the
term's metrics onto each gram. A word repeated inside one term counts once
toward its 1-gram; 2- and 3-gram windows are never deduplicated.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from accounthealth_mcp.analyzers.negative_keywords import NegativeIndex
from accounthealth_mcp.models.keyword import MatchType, NegativeKeyword
from accounthealth_mcp.models.ngram import NGramAnalysisResult, NGramMetrics
from accounthealth_mcp.models.search_term import SearchTerm

logger = logging.getLogger(__name__)

MAX_GRAM_SIZE = 3
TOP_PATTERNS = 5

# Default thresholds of the negative/expansion candidate filters
DEFAULT_NEGATIVE_MIN_COST = 1.0
DEFAULT_MIN_TERM_COUNT = 2
DEFAULT_EXPANSION_MIN_ROAS = 2.0


class _GramTotals:
    __slots__ = ("n", "count", "clicks", "cost", "conversions", "conversion_value")

    def __init__(self, n: int):
        self.n = n
        self.count = 0
        self.clicks = 0.0
        self.cost = 0.0
        self.conversions = 0.0
        self.conversion_value = 0.0

    def add(self, term: SearchTerm) -> None:
        self.count += 1
        self.clicks += term.clicks
        self.cost += term.cost
        self.conversions += term.conversions
        self.conversion_value += term.conversion_value


def _coerce_terms(search_terms: Iterable[Any]) -> list[SearchTerm]:
    terms = []
    for raw in search_terms or ():
        if isinstance(raw, SearchTerm):
            terms.append(raw)
            continue
        if not isinstance(raw, Mapping):
            logger.debug(f"Skipping non-mapping search term record: {type(raw)}")
            continue
        try:
            terms.append(SearchTerm.model_validate(raw))
        except ValidationError as e:
            logger.debug(f"Skipping invalid search term record: {e}")
    return terms


def _grams_for(words: list[str]) -> Iterable[tuple[int, str]]:
    # Per-term dedup applies to single words only
    for word in dict.fromkeys(words):
        yield 1, word
    for n in range(2, MAX_GRAM_SIZE + 1):
        for i in range(len(words) - n + 1):
            yield n, " ".join(words[i : i + n])


def _by_cost(metrics: NGramMetrics) -> tuple[float, str]:
    return (-metrics.cost, metrics.gram)


def mine_ngrams(search_terms: Iterable[Any]) -> NGramAnalysisResult:
    """Aggregate search term metrics onto 1/2/3-word grams.

    Args:
        search_terms: SearchTerm models or raw mappings (camelCase or
            snake_case); unusable records are skipped

    Returns:
        Gram lists sorted by cost descending plus the top winning and top
        wasteful patterns across all sizes
    """
    terms = _coerce_terms(search_terms)
    totals: dict[str, _GramTotals] = {}

    for term in terms:
        words = term.search_term.lower().split()
        for n, gram in _grams_for(words):
            gram = gram.strip()
            if not gram:
                continue
            entry = totals.get(gram)
            if entry is None:
                entry = totals[gram] = _GramTotals(n)
            entry.add(term)

    metrics = [
        NGramMetrics(
            gram=gram,
            n=entry.n,
            count=entry.count,
            clicks=entry.clicks,
            cost=entry.cost,
            conversions=entry.conversions,
            conversion_value=entry.conversion_value,
        )
        for gram, entry in totals.items()
    ]
    by_size: dict[int, list[NGramMetrics]] = {1: [], 2: [], 3: []}
    for m in metrics:
        by_size[m.n].append(m)
    for grams in by_size.values():
        grams.sort(key=_by_cost)

    winning = sorted(
        (m for m in metrics if m.conversions > 0),
        key=lambda m: (-m.conversion_value, m.gram),
    )
    wasteful = sorted(
        (m for m in metrics if m.roas < 1 or m.conversions == 0), key=_by_cost
    )

    logger.debug(
        f"Mined {len(metrics)} grams from {len(terms)} search terms "
        f"({len(by_size[1])}/{len(by_size[2])}/{len(by_size[3])} by size)"
    )
    return NGramAnalysisResult(
        one_grams=by_size[1],
        two_grams=by_size[2],
        three_grams=by_size[3],
        top_winning=winning[:TOP_PATTERNS],
        top_wasteful=wasteful[:TOP_PATTERNS],
        search_terms_analyzed=len(terms),
    )


def _as_negative(value: Any) -> NegativeKeyword | None:
    if isinstance(value, NegativeKeyword):
        return value
    if isinstance(value, str):
        # Bare strings behave like phrase negatives
        return NegativeKeyword(text=value, match_type=MatchType.PHRASE)
    if isinstance(value, Mapping):
        try:
            return NegativeKeyword.model_validate(value)
        except ValidationError:
            return None
    return None


def negative_candidates(
    result: NGramAnalysisResult,
    min_cost: float = DEFAULT_NEGATIVE_MIN_COST,
    min_count: int = DEFAULT_MIN_TERM_COUNT,
    existing_negatives: Iterable[Any] = (),
) -> list[NGramMetrics]:
    """Grams that spent money without converting, worst spenders first.

    Args:
        result: Mined n-grams
        min_cost: Minimum spend for a gram to be flagged
        min_count: Minimum number of contributing occurrences
        existing_negatives: Negatives already in the account (models,
            mappings or plain strings); grams they already block are dropped

    Returns:
        Candidate grams sorted by cost descending
    """
    negatives = [n for n in map(_as_negative, existing_negatives) if n is not None]
    index = NegativeIndex(negatives)
    candidates = [
        m
        for m in result.all_grams()
        if m.conversions == 0
        and m.cost >= min_cost
        and m.count >= min_count
        and not index.covers(m.gram)
    ]
    return sorted(candidates, key=_by_cost)


def expansion_candidates(
    result: NGramAnalysisResult,
    min_count: int = DEFAULT_MIN_TERM_COUNT,
    min_roas: float = DEFAULT_EXPANSION_MIN_ROAS,
    existing_keywords: Iterable[str] = (),
) -> list[NGramMetrics]:
    """Converting grams above a ROAS floor that are not already keywords.

    Returns:
        Candidate grams sorted by ROAS descending
    """
    targeted = {" ".join(str(k).lower().split()) for k in existing_keywords}
    candidates = [
        m
        for m in result.all_grams()
        if m.conversions > 0
        and m.count >= min_count
        and m.roas > min_roas
        and m.gram not in targeted
    ]
    return sorted(candidates, key=lambda m: (-m.roas, m.gram))
