"""Render an n-gram analysis as a plain-text prompt block."""

from pydantic import BaseModel, Field

from accounthealth_mcp.core.config import HealthEngineSettings
from accounthealth_mcp.formatters.cells import fixed, money, sanitize_cell
from accounthealth_mcp.models.ngram import NGramAnalysisResult, NGramMetrics
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, SourceState


class NGramBlockLimits(BaseModel):
    """Maximum rows rendered per section."""

    one_grams: int = Field(default=20, ge=1)
    two_grams: int = Field(default=15, ge=1)
    three_grams: int = Field(default=10, ge=1)
    negative_candidates: int = Field(default=15, ge=1)
    expansion_candidates: int = Field(default=10, ge=1)

    @classmethod
    def from_settings(cls, settings: HealthEngineSettings) -> "NGramBlockLimits":
        return cls(
            one_grams=settings.one_gram_rows,
            two_grams=settings.two_gram_rows,
            three_grams=settings.three_gram_rows,
            negative_candidates=settings.candidate_rows,
            expansion_candidates=settings.expansion_rows,
        )


GRAM_HEADER = "| Pattern | Terms | Clicks | Cost | Conv | Conv Value | ROAS | CPA |"
GRAM_RULE = "|---------|-------|--------|------|------|------------|------|-----|"


class _Renderer:
    def __init__(self, currency_symbol: str):
        self.currency_symbol = currency_symbol
        self.lines: list[str] = []

    def heading(self, title: str, total: int, limit: int | None = None) -> None:
        self.lines.append("")
        if limit is not None and total > limit:
            self.lines.append(f"--- {title} (showing {limit} of {total}) ---")
        else:
            self.lines.append(f"--- {title} ---")

    def gram_row(self, m: NGramMetrics) -> str:
        return (
            f"| {sanitize_cell(m.gram)} | {m.count} | {fixed(m.clicks, 0)} | "
            f"{money(m.cost, self.currency_symbol)} | {fixed(m.conversions)} | "
            f"{money(m.conversion_value, self.currency_symbol)} | "
            f"{fixed(m.roas)}x | {money(m.cpa, self.currency_symbol)} |"
        )

    def gram_table(
        self, title: str, grams: list[NGramMetrics], limit: int, empty: str
    ) -> None:
        self.heading(title, len(grams), limit)
        if not grams:
            self.lines.append(f"No data: {empty}")
            return
        self.lines += [GRAM_HEADER, GRAM_RULE]
        self.lines += [self.gram_row(m) for m in grams[:limit]]


def format_ngram_block(
    result: NGramAnalysisResult,
    negative_candidates: list[NGramMetrics] | None = None,
    expansion_candidates: list[NGramMetrics] | None = None,
    limits: NGramBlockLimits | None = None,
    currency_symbol: str = "$",
    snapshot: AccountSnapshot | None = None,
) -> str:
    """Render ``result`` as deterministic text.

    Every section is always present; empty sections carry an explicit
    "No data" line so readers can tell absence of data from omission.

    Args:
        result: Mined n-grams
        negative_candidates: Output of ``negative_candidates``
        expansion_candidates: Output of ``expansion_candidates``
        limits: Rows per section
        currency_symbol: Symbol for money columns
        snapshot: Source snapshot; a failed search term fetch is reported as
            such rather than as an empty period

    Returns:
        The n-gram block text, newline terminated
    """
    limits = limits or NGramBlockLimits()
    negatives = negative_candidates or []
    expansions = expansion_candidates or []
    out = _Renderer(currency_symbol)
    out.lines += [
        "=== N-GRAM ANALYSIS ===",
        f"Search terms analyzed: {result.search_terms_analyzed}",
    ]
    no_terms = None
    if result.search_terms_analyzed == 0:
        no_terms = "no search terms in the selected period."
        if (
            snapshot is not None
            and snapshot.source_state(DataSource.SEARCH_TERMS)
            == SourceState.UNAVAILABLE
        ):
            no_terms = f"{snapshot.describe_missing(DataSource.SEARCH_TERMS)}."

    out.gram_table(
        "Top 1-Word Patterns (by spend)",
        result.one_grams,
        limits.one_grams,
        no_terms or "no single-word patterns.",
    )
    out.gram_table(
        "Top 2-Word Patterns (by spend)",
        result.two_grams,
        limits.two_grams,
        no_terms or "no search term has 2 or more words.",
    )
    out.gram_table(
        "Top 3-Word Patterns (by spend)",
        result.three_grams,
        limits.three_grams,
        no_terms or "no search term has 3 or more words.",
    )
    out.gram_table(
        "TOP WINNING PATTERNS (by conversion value)",
        result.top_winning,
        len(result.top_winning) or 1,
        no_terms or "no pattern recorded conversions.",
    )
    out.gram_table(
        "TOP WASTEFUL PATTERNS (ROAS < 1 or 0 conversions, by spend)",
        result.top_wasteful,
        len(result.top_wasteful) or 1,
        no_terms or "no pattern is below 1x ROAS.",
    )

    out.heading(
        "NEGATIVE KEYWORD CANDIDATES (spend without conversions)",
        len(negatives),
        limits.negative_candidates,
    )
    if negatives:
        out.lines += [
            "| Word/Phrase | Terms | Clicks | Wasted Cost | Action |",
            "|-------------|-------|--------|-------------|--------|",
        ]
        for m in negatives[: limits.negative_candidates]:
            out.lines.append(
                f"| {sanitize_cell(m.gram)} | {m.count} | {fixed(m.clicks, 0)} | "
                f"{money(m.cost, currency_symbol)} | ADD AS NEGATIVE |"
            )
        total = sum(m.cost for m in negatives)
        out.lines.append(
            f"Total potential savings from negatives: "
            f"{money(total, currency_symbol)}/period"
        )
    else:
        out.lines.append(
            f"No data: {no_terms or 'no non-converting pattern met the thresholds.'}"
        )

    out.heading(
        "EXPANSION CANDIDATES (converting patterns)",
        len(expansions),
        limits.expansion_candidates,
    )
    if expansions:
        for m in expansions[: limits.expansion_candidates]:
            out.lines.append(
                f'- "{sanitize_cell(m.gram)}": {fixed(m.conversions)} conv, '
                f"ROAS {fixed(m.roas)}x, in {m.count} terms"
            )
    else:
        out.lines.append(
            f"No data: {no_terms or 'no converting pattern met the thresholds.'}"
        )

    return "\n".join(out.lines) + "\n"
