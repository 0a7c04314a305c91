"""Tests for the health and n-gram text blocks."""

from conftest import make_snapshot, search_term

from accounthealth_mcp.analyzers.aggregator import aggregate_report
from accounthealth_mcp.analyzers.ngram import (
    expansion_candidates,
    mine_ngrams,
    negative_candidates,
)
from accounthealth_mcp.core.config import HealthEngineSettings
from accounthealth_mcp.formatters import (
    NGramBlockLimits,
    fixed,
    format_health_block,
    format_ngram_block,
    sanitize_cell,
)
from accounthealth_mcp.formatters.health_block import NO_CHECK_FINDING
from accounthealth_mcp.models.health import (
    CATEGORY_NAMES,
    CATEGORY_ORDER,
    HealthCategory,
    HealthCheck,
)
from accounthealth_mcp.models.snapshot import FetchError


def check(category, score, finding="Looks fine", low_confidence=False):
    return HealthCheck(
        category=category,
        name=CATEGORY_NAMES[category],
        score=score,
        finding=finding,
        recommendation=f"Improve {CATEGORY_NAMES[category]}",
        low_confidence=low_confidence,
    )


class TestCells:
    def test_sanitize_cell(self):
        assert sanitize_cell("a|b\nc") == "a/b c"
        assert sanitize_cell("  spaced   out ") == "spaced out"
        assert sanitize_cell(3.5) == "3.5"

    def test_fixed(self):
        assert fixed(1.234) == "1.23"
        assert fixed(1.26, 1) == "1.3"
        assert fixed(float("nan")) == "0.00"
        assert fixed(float("inf"), 0) == "0"


class TestHealthBlock:
    def test_header_and_rows(self):
        report = aggregate_report(
            [check(category, 90) for category in CATEGORY_ORDER]
        )
        block = format_health_block(report)
        lines = block.splitlines()
        assert lines[0] == "=== ACCOUNT HEALTH SCORE: 90.0/100 (A-) ==="
        assert "| Check | Score | Status | Confidence | Key Finding |" in lines
        assert (
            "| Conversion Tracking | 90.0/100 | EXCELLENT | normal | Looks fine |"
            in lines
        )
        for name in CATEGORY_NAMES.values():
            assert f"| {name} |" in block
        assert block.endswith("\n")

    def test_identical_input_gives_identical_text(self):
        checks = [check(category, 55) for category in CATEGORY_ORDER]
        assert format_health_block(aggregate_report(checks)) == format_health_block(
            aggregate_report(list(reversed(checks)))
        )

    def test_missing_category_rendered_as_not_evaluated(self):
        report = aggregate_report([check(HealthCategory.STRUCTURE, 70)])
        block = format_health_block(report)
        assert (
            f"| Conversion Tracking | n/a | n/a | low | {NO_CHECK_FINDING} |" in block
        )
        assert f"- Market Competition: {NO_CHECK_FINDING}" in block
        assert "- Account Structure: Improve Account Structure" in block

    def test_pipes_and_newlines_sanitized(self):
        report = aggregate_report(
            [check(HealthCategory.AD_STRENGTH, 30, finding="bad | worse\nworst")]
        )
        block = format_health_block(report)
        assert "bad / worse worst" in block
        assert "bad | worse" not in block

    def test_top_issues_section(self):
        report = aggregate_report(
            [
                check(HealthCategory.AD_STRENGTH, 30),
                check(HealthCategory.QUALITY_SCORE, 90),
            ]
        )
        block = format_health_block(report)
        assert "TOP ISSUES TO ADDRESS:" in block
        assert "1. [CRITICAL] Ad Strength (30.0/100): Improve Ad Strength" in block

    def test_sections_present_without_data(self):
        report = aggregate_report(
            [check(c, 50, low_confidence=True) for c in CATEGORY_ORDER]
        )
        block = format_health_block(report)
        assert "TOP ISSUES TO ADDRESS:" in block
        assert "No data: no category had enough data to be scored." in block
        assert "RECOMMENDATIONS BY CATEGORY:" in block
        assert "- Device Performance (low confidence): " in block
        assert "DATA AVAILABILITY:" not in block

    def test_data_availability(self):
        snapshot = make_snapshot(
            campaigns=[{"id": "1"}],
            ads=FetchError(source="ads", message="deadline | exceeded"),
            search_terms=[{"searchTerm": "a"}, "junk"],
        )
        block = format_health_block(aggregate_report([]), snapshot)
        assert "DATA AVAILABILITY:" in block
        assert "- Campaigns: 1 records" in block
        assert "- Ads: unavailable (fetch failed: deadline / exceeded)" in block
        assert "- Keywords: no records returned" in block
        assert "- Search terms: 1 records, 1 unusable records skipped" in block


class TestNGramBlock:
    def test_empty_input(self):
        block = format_ngram_block(mine_ngrams([]))
        assert block.startswith("=== N-GRAM ANALYSIS ===\nSearch terms analyzed: 0\n")
        assert "--- Top 1-Word Patterns (by spend) ---" in block
        assert "--- NEGATIVE KEYWORD CANDIDATES (spend without conversions) ---" in (
            block
        )
        assert "--- EXPANSION CANDIDATES (converting patterns) ---" in block
        assert block.count("No data: no search terms in the selected period.") == 7
        assert block.endswith("\n")

    def test_failed_search_term_fetch_is_not_an_empty_period(self):
        snapshot = make_snapshot(
            search_terms=FetchError(source="search_terms", message="quota exhausted")
        )
        block = format_ngram_block(mine_ngrams([]), snapshot=snapshot)
        reason = "search terms source unavailable (fetch failed: quota exhausted)."
        assert block.count(f"No data: {reason}") == 7
        assert "selected period" not in block

    def test_empty_search_term_source_keeps_period_wording(self):
        block = format_ngram_block(mine_ngrams([]), snapshot=make_snapshot())
        assert block.count("No data: no search terms in the selected period.") == 7

    def test_truncated_section_heading(self):
        result = mine_ngrams(
            [
                search_term("alpha", cost=5.0),
                search_term("beta", cost=3.0),
                search_term("gamma", cost=9.0),
            ]
        )
        block = format_ngram_block(result, limits=NGramBlockLimits(one_grams=1))
        assert "--- Top 1-Word Patterns (by spend) (showing 1 of 3) ---" in block
        assert "| gamma | 1 | 5 | $9.00 | 0.00 | $0.00 | 0.00x | $0.00 |" in block
        assert "| alpha |" not in block.split("TOP WINNING")[0]
        assert "No data: no search term has 2 or more words." in block

    def test_negative_savings_total(self):
        result = mine_ngrams(
            [
                search_term("alpha", cost=5.0),
                search_term("beta", cost=3.0),
                search_term("gamma", cost=9.0),
            ]
        )
        negatives = negative_candidates(result, min_cost=1.0, min_count=1)
        block = format_ngram_block(result, negatives, currency_symbol="€")
        assert "| gamma | 1 | 5 | €9.00 | ADD AS NEGATIVE |" in block
        assert "Total potential savings from negatives: €17.00/period" in block
        assert "No data: no converting pattern met the thresholds." in block

    def test_expansion_lines(self):
        result = mine_ngrams(
            [
                search_term("trail shoes", cost=10.0, conversions=2.0, value=60.0),
                search_term("trail boots", cost=10.0, conversions=1.0, value=50.0),
            ]
        )
        expansions = expansion_candidates(result, min_count=2, min_roas=2.0)
        block = format_ngram_block(result, expansion_candidates=expansions)
        assert '- "trail": 3.00 conv, ROAS 5.50x, in 2 terms' in block
        assert "No data: no non-converting pattern met the thresholds." in block

    def test_deterministic(self):
        terms = [search_term(f"term {i}", cost=float(i)) for i in range(30)]
        assert format_ngram_block(mine_ngrams(terms)) == format_ngram_block(
            mine_ngrams(list(terms))
        )

    def test_limits_from_settings(self):
        limits = NGramBlockLimits.from_settings(
            HealthEngineSettings(one_gram_rows=3, candidate_rows=4)
        )
        assert limits.one_grams == 3
        assert limits.negative_candidates == 4
        assert limits.two_grams == 15
