"""Pre-analysis engine: normalize, score, mine and format in one call."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from pydantic import Field

from accounthealth_mcp.analyzers import EVALUATOR_CLASSES
from accounthealth_mcp.analyzers.aggregator import aggregate_report
from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.analyzers.ngram import (
    expansion_candidates,
    mine_ngrams,
    negative_candidates,
)
from accounthealth_mcp.core.config import HealthEngineSettings, get_settings
from accounthealth_mcp.core.exceptions import ConfigurationError, EvaluationError
from accounthealth_mcp.data_providers.normalizer import normalize_snapshot
from accounthealth_mcp.formatters import (
    NGramBlockLimits,
    format_health_block,
    format_ngram_block,
)
from accounthealth_mcp.models.health import (
    CATEGORY_NAMES,
    CATEGORY_ORDER,
    NEUTRAL_SCORE,
    HealthCategory,
    HealthCheck,
    HealthModel,
    HealthScoreReport,
)
from accounthealth_mcp.models.ngram import NGramAnalysisResult, NGramMetrics
from accounthealth_mcp.models.snapshot import AccountSnapshot

logger = logging.getLogger(__name__)


class PreAnalysisResult(HealthModel):
    """Everything the pre-analysis produces for one snapshot."""

    health_block: str
    ngram_block: str
    health_score: HealthScoreReport
    ngram_analysis: NGramAnalysisResult
    negative_candidates: list[NGramMetrics] = Field(default_factory=list)
    expansion_candidates: list[NGramMetrics] = Field(default_factory=list)
    snapshot: AccountSnapshot = Field(default_factory=AccountSnapshot, exclude=True)

    def to_dashboard(self) -> dict[str, Any]:
        """JSON payload for the dashboard health widget."""
        report = self.health_score
        return {
            "status": "success",
            "healthScore": report.model_dump(by_alias=True, mode="json"),
            "summary": report.summary,
            "overallScore": report.overall_score,
            "overallGrade": report.overall_grade,
            "checks": [c.model_dump(by_alias=True, mode="json") for c in report.checks],
            "searchTerms": [
                {
                    "searchTerm": t.search_term,
                    "impressions": t.impressions,
                    "clicks": t.clicks,
                    "cost": t.cost,
                    "conversions": t.conversions,
                    "conversionValue": t.conversion_value,
                }
                for t in self.snapshot.search_terms
            ],
            "healthBlock": self.health_block,
            "ngramBlock": self.ngram_block,
        }


class HealthScoreEngine:
    """Runs the category evaluators and the n-gram miner over a snapshot.

    Evaluators share no state, so they may run on a thread pool; the report
    always lists checks in category order regardless of completion order. A
    failing evaluator is logged and replaced by a neutral, low-confidence
    check so the other categories still complete.
    """

    def __init__(
        self,
        settings: HealthEngineSettings | None = None,
        parallel: bool | None = None,
        evaluators: list[BaseHealthEvaluator] | None = None,
    ):
        """Initialize engine.

        Args:
            settings: Engine settings; defaults to ``get_settings()``
            parallel: Override ``settings.parallel_evaluation``
            evaluators: Custom evaluator instances (one per category)
        """
        self.settings = settings or get_settings()
        self.parallel = (
            self.settings.parallel_evaluation if parallel is None else parallel
        )
        self.weights = self.settings.resolved_weights()

        if evaluators is None:
            evaluators = [
                cls(
                    weight=self.weights[cls.category],
                    currency_symbol=self.settings.currency_symbol,
                )
                for cls in EVALUATOR_CLASSES
            ]
        categories = [e.category for e in evaluators]
        duplicates = sorted({c.value for c in categories if categories.count(c) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Duplicate evaluators for categories: {', '.join(duplicates)}"
            )
        self.evaluators = evaluators

    def _run_evaluator(
        self, evaluator: BaseHealthEvaluator, snapshot: AccountSnapshot
    ) -> HealthCheck:
        try:
            check = evaluator.evaluate(snapshot)
            if check.category != evaluator.category:
                raise EvaluationError(
                    evaluator.category.value,
                    f"returned a check for {check.category.value}",
                )
            return check
        except Exception as e:
            logger.exception(
                f"Evaluator for {evaluator.name} failed",
                extra={"category": evaluator.category.value},
            )
            return HealthCheck(
                category=evaluator.category,
                name=evaluator.name,
                score=NEUTRAL_SCORE,
                finding=f"Insufficient data: evaluation failed: {type(e).__name__}",
                recommendation=(
                    "This category could not be evaluated; re-run the analysis and "
                    "check the server logs if the failure persists."
                ),
                weight=evaluator.weight,
                low_confidence=True,
                data_points={"error": type(e).__name__},
            )

    def _not_evaluated(self, category: HealthCategory) -> HealthCheck:
        return HealthCheck(
            category=category,
            name=CATEGORY_NAMES[category],
            score=NEUTRAL_SCORE,
            finding="Insufficient data: no evaluator is configured for this category.",
            recommendation=(
                "This category was not scored; enable its evaluator to include it "
                "in the overall score."
            ),
            weight=self.weights[category],
            low_confidence=True,
            data_points={"error": "NotEvaluated"},
        )

    def _complete(self, checks: list[HealthCheck]) -> list[HealthCheck]:
        """One check per category in category order, neutral where none ran."""
        by_category = {c.category: c for c in checks}
        return [
            by_category.get(category) or self._not_evaluated(category)
            for category in CATEGORY_ORDER
        ]

    def evaluate(self, snapshot: AccountSnapshot) -> list[HealthCheck]:
        """Run every evaluator and return one check per category, in order."""
        if not self.parallel:
            return self._complete(
                [self._run_evaluator(e, snapshot) for e in self.evaluators]
            )

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            futures = [
                pool.submit(self._run_evaluator, e, snapshot) for e in self.evaluators
            ]
            return self._complete([f.result() for f in futures])

    def score(self, snapshot: AccountSnapshot) -> HealthScoreReport:
        return aggregate_report(self.evaluate(snapshot), self.weights)

    def mine(
        self, snapshot: AccountSnapshot
    ) -> tuple[NGramAnalysisResult, list[NGramMetrics], list[NGramMetrics]]:
        """Mine n-grams and derive negative and expansion candidates."""
        result = mine_ngrams(snapshot.search_terms)
        negatives = negative_candidates(
            result,
            min_cost=self.settings.negative_min_cost,
            min_count=self.settings.negative_min_count,
            existing_negatives=snapshot.negative_keywords,
        )
        expansions = expansion_candidates(
            result,
            min_count=self.settings.expansion_min_count,
            min_roas=self.settings.expansion_min_roas,
            existing_keywords=[k.text for k in snapshot.keywords],
        )
        return result, negatives, expansions

    def run(self, snapshot: AccountSnapshot) -> PreAnalysisResult:
        """Score and mine ``snapshot`` and render both text blocks."""
        logger.info(
            f"Running pre-analysis over {sum(snapshot.record_counts().values())} "
            f"records ({len(snapshot.unavailable)} sources unavailable)"
        )
        if self.parallel:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
                mined: Future = pool.submit(self.mine, snapshot)
                checks = [
                    f.result()
                    for f in [
                        pool.submit(self._run_evaluator, e, snapshot)
                        for e in self.evaluators
                    ]
                ]
                ngrams, negatives, expansions = mined.result()
            report = aggregate_report(self._complete(checks), self.weights)
        else:
            report = self.score(snapshot)
            ngrams, negatives, expansions = self.mine(snapshot)

        health_block = format_health_block(report, snapshot)
        ngram_block = format_ngram_block(
            ngrams,
            negatives,
            expansions,
            limits=NGramBlockLimits.from_settings(self.settings),
            currency_symbol=self.settings.currency_symbol,
            snapshot=snapshot,
        )
        logger.info(
            f"Pre-analysis complete: overall {report.overall_score:.2f} "
            f"({report.overall_grade}), {ngrams.search_terms_analyzed} search terms "
            "mined"
        )
        return PreAnalysisResult(
            health_block=health_block,
            ngram_block=ngram_block,
            health_score=report,
            ngram_analysis=ngrams,
            negative_candidates=negatives,
            expansion_candidates=expansions,
            snapshot=snapshot,
        )


def run_pre_analysis(
    campaigns: Any = None,
    ad_groups: Any = None,
    keywords: Any = None,
    ads: Any = None,
    negative_keywords: Any = None,
    search_terms: Any = None,
    auction_insights: Any = None,
    device_stats: Any = None,
    asset_performance: Any = None,
    change_events: Any = None,
    conversion_actions: Any = None,
    pmax_products: Any = None,
    *,
    settings: HealthEngineSettings | None = None,
) -> PreAnalysisResult:
    """Normalize the twelve collections, then score, mine and format them.

    Each collection may be a list of records, ``None``, or a ``FetchError``
    for a source whose fetch failed. Malformed or missing data never raises;
    it lowers confidence in the affected categories instead.

    Returns:
        PreAnalysisResult with ``health_block``, ``ngram_block`` and
        ``health_score``
    """
    snapshot = normalize_snapshot(
        campaigns=campaigns,
        ad_groups=ad_groups,
        keywords=keywords,
        ads=ads,
        negative_keywords=negative_keywords,
        search_terms=search_terms,
        auction_insights=auction_insights,
        device_stats=device_stats,
        asset_performance=asset_performance,
        change_events=change_events,
        conversion_actions=conversion_actions,
        pmax_products=pmax_products,
    )
    return HealthScoreEngine(settings=settings).run(snapshot)
