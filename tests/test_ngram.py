"""Tests for search term n-gram mining and candidate selection."""

import pytest
from conftest import search_term

from accounthealth_mcp.analyzers.ngram import (
    expansion_candidates,
    mine_ngrams,
    negative_candidates,
)
from accounthealth_mcp.models.keyword import NegativeKeyword
from accounthealth_mcp.models.search_term import SearchTerm


def grams(result, n):
    sizes = {1: result.one_grams, 2: result.two_grams, 3: result.three_grams}
    return {m.gram: m for m in sizes[n]}


class TestMineNgrams:
    def test_shared_word_aggregates_across_terms(self):
        result = mine_ngrams(
            [
                search_term("red shoes", cost=10.0),
                search_term("red hat", cost=5.0, conversions=1.0, value=20.0),
            ]
        )
        ones = grams(result, 1)
        assert ones["red"].count == 2
        assert ones["red"].cost == 15.0
        assert ones["red"].conversions == 1.0
        assert [m.gram for m in result.one_grams] == ["red", "shoes", "hat"]
        assert set(grams(result, 2)) == {"red shoes", "red hat"}
        assert result.three_grams == []
        assert result.search_terms_analyzed == 2

    def test_red_shoes_red_hat_totals(self):
        result = mine_ngrams(
            [
                search_term(
                    "red shoes", cost=20.0, conversions=2.0, value=100.0, clicks=10
                ),
                search_term("red hat", cost=15.0, clicks=5),
            ]
        )
        red = grams(result, 1)["red"]
        assert red.count == 2
        assert red.clicks == 15
        assert red.cost == 35.0
        assert red.conversions == 2.0
        assert red.conversion_value == 100.0
        assert red.roas == pytest.approx(100 / 35)
        assert red.cpa == pytest.approx(17.5)
        assert grams(result, 1)["shoes"].count == 1
        assert grams(result, 1)["hat"].count == 1
        assert {g: m.count for g, m in grams(result, 2).items()} == {
            "red shoes": 1,
            "red hat": 1,
        }
        assert result.three_grams == []

    def test_top_patterns_capped_at_five_in_order(self):
        result = mine_ngrams(
            [
                search_term("alpha beta", cost=40.0, conversions=1.0, value=90.0),
                search_term("delta epsilon", cost=30.0, conversions=1.0, value=70.0),
                search_term("zeta eta theta", cost=20.0, conversions=1.0, value=50.0),
                search_term("iota kappa", cost=12.0),
                search_term("lambda mu nu", cost=8.0),
            ]
        )
        winning = result.top_winning
        assert len(winning) == 5
        values = [m.conversion_value for m in winning]
        assert values == sorted(values, reverse=True)
        assert values == [90.0, 90.0, 90.0, 70.0, 70.0]

        wasteful = result.top_wasteful
        assert len(wasteful) == 5
        costs = [m.cost for m in wasteful]
        assert costs == sorted(costs, reverse=True)
        assert [m.gram for m in wasteful[:3]] == ["iota", "iota kappa", "kappa"]

    def test_repeated_word_counts_once_per_term(self):
        result = mine_ngrams([search_term("shoes shoes sale", cost=9.0)])
        ones = grams(result, 1)
        assert ones["shoes"].count == 1
        assert ones["shoes"].cost == 9.0
        assert set(grams(result, 2)) == {"shoes shoes", "shoes sale"}
        assert set(grams(result, 3)) == {"shoes shoes sale"}

    def test_multi_word_windows_are_not_deduplicated(self):
        result = mine_ngrams([search_term("a b a b", cost=1.0)])
        twos = grams(result, 2)
        assert twos["a b"].count == 2
        assert twos["a b"].cost == 2.0
        assert twos["b a"].count == 1

    def test_terms_are_lowercased_and_trimmed(self):
        result = mine_ngrams([search_term("  Red   SHOES ")])
        assert set(grams(result, 2)) == {"red shoes"}

    def test_sorted_by_cost_then_gram(self):
        result = mine_ngrams(
            [
                search_term("beta", cost=5.0),
                search_term("alpha", cost=5.0),
                search_term("gamma", cost=9.0),
            ]
        )
        assert [m.gram for m in result.one_grams] == ["gamma", "alpha", "beta"]

    def test_top_winning_and_wasteful(self):
        result = mine_ngrams(
            [
                search_term("brand shoes", cost=10.0, conversions=2.0, value=100.0),
                search_term("cheap boots", cost=30.0),
                search_term("sale socks", cost=20.0, conversions=1.0, value=5.0),
            ]
        )
        assert result.top_winning[0].gram in {"brand", "brand shoes", "shoes"}
        assert result.top_winning[0].conversion_value == 100.0
        assert len(result.top_winning) == 5
        assert result.top_wasteful[0].gram == "boots"
        assert all(m.roas < 1 or m.conversions == 0 for m in result.top_wasteful)

    def test_accepts_models_and_skips_junk(self):
        result = mine_ngrams(
            [SearchTerm(search_term="red shoes"), {"searchTerm": "blue"}, "junk", 3]
        )
        assert result.search_terms_analyzed == 2

    def test_empty_input(self):
        result = mine_ngrams([])
        assert result.is_empty
        assert result.search_terms_analyzed == 0
        assert result.top_winning == []

    def test_derived_metrics(self):
        result = mine_ngrams(
            [search_term("shoes", cost=10.0, conversions=2.0, value=40.0)]
        )
        shoes = result.one_grams[0]
        assert shoes.roas == pytest.approx(4.0)
        assert shoes.cpa == pytest.approx(5.0)


class TestNegativeCandidates:
    @pytest.fixture
    def result(self):
        return mine_ngrams(
            [
                search_term("free shoes", cost=3.0),
                search_term("free boots", cost=4.0),
                search_term("cheap socks", cost=0.5),
                search_term("cheap hats", cost=0.4),
                search_term("brand shoes", cost=8.0, conversions=1.0, value=50.0),
            ]
        )

    def test_thresholds(self, result):
        candidates = negative_candidates(result, min_cost=1.0, min_count=2)
        assert [m.gram for m in candidates] == ["free"]
        assert candidates[0].cost == 7.0

    def test_lower_thresholds(self, result):
        candidates = negative_candidates(result, min_cost=0.5, min_count=1)
        assert [m.gram for m in candidates][:3] == ["free", "boots", "free boots"]
        assert all(m.conversions == 0 for m in candidates)

    def test_existing_negatives_excluded(self, result):
        candidates = negative_candidates(
            result,
            min_cost=0.5,
            min_count=1,
            existing_negatives=[
                "free",
                NegativeKeyword(text="cheap socks", match_type="EXACT"),
                {"text": "boots", "matchType": "BROAD"},
            ],
        )
        names = [m.gram for m in candidates]
        assert "free" not in names
        assert "free boots" not in names
        assert "cheap socks" not in names
        assert "boots" not in names
        assert "socks" in names


class TestExpansionCandidates:
    @pytest.fixture
    def result(self):
        return mine_ngrams(
            [
                search_term("trail shoes", cost=10.0, conversions=2.0, value=60.0),
                search_term("trail boots", cost=10.0, conversions=1.0, value=50.0),
                search_term("road shoes", cost=10.0, conversions=1.0, value=15.0),
            ]
        )

    def test_roas_and_count_thresholds(self, result):
        candidates = expansion_candidates(result, min_count=2, min_roas=2.0)
        assert [m.gram for m in candidates] == ["trail", "shoes"]
        assert candidates[0].roas == pytest.approx(5.5)
        assert candidates[1].roas == pytest.approx(3.75)

    def test_existing_keywords_excluded(self, result):
        candidates = expansion_candidates(
            result, min_count=1, min_roas=2.0, existing_keywords=["Trail  Shoes"]
        )
        names = [m.gram for m in candidates]
        assert "trail shoes" not in names
        assert names[0] == "trail"
        assert "trail boots" in names
