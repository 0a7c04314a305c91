"""Base evaluator class for category health checks."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterable

from accounthealth_mcp.models.health import (
    CATEGORY_NAMES,
    DEFAULT_CATEGORY_WEIGHTS,
    NEUTRAL_SCORE,
    HealthCategory,
    HealthCheck,
)
from accounthealth_mcp.models.snapshot import (
    SOURCE_LABELS,
    AccountSnapshot,
    DataSource,
    SourceState,
)


class BaseHealthEvaluator(ABC):
    """Base class for all category evaluators.

    An evaluator inspects the full normalized snapshot and returns exactly one
    HealthCheck for its category. Evaluators hold no state between calls, so
    one instance can be shared across threads.
    """

    category: ClassVar[HealthCategory]
    # Sources whose absence makes the category unscorable
    required_sources: ClassVar[tuple[DataSource, ...]] = ()
    no_data_recommendation: ClassVar[str] = (
        "Make sure the account has activity in the selected period and that the "
        "data source can be fetched, then re-run the analysis."
    )

    def __init__(self, weight: float | None = None, currency_symbol: str = "$"):
        """Initialize evaluator.

        Args:
            weight: Category weight; defaults to DEFAULT_CATEGORY_WEIGHTS
            currency_symbol: Symbol used when findings quote money
        """
        self.weight = (
            DEFAULT_CATEGORY_WEIGHTS[self.category] if weight is None else weight
        )
        self.currency_symbol = currency_symbol

    @property
    def name(self) -> str:
        return CATEGORY_NAMES[self.category]

    @abstractmethod
    def evaluate(self, snapshot: AccountSnapshot) -> HealthCheck:
        """Score the category for ``snapshot``.

        Args:
            snapshot: Normalized account data

        Returns:
            One HealthCheck for this evaluator's category
        """
        pass

    def missing_required(self, snapshot: AccountSnapshot) -> list[DataSource]:
        """Required sources that have no records (empty or unavailable)."""
        return [
            source
            for source in self.required_sources
            if snapshot.source_state(source) != SourceState.AVAILABLE
        ]

    def _check(
        self,
        score: float,
        finding: str,
        recommendation: str,
        data_points: dict[str, Any] | None = None,
        low_confidence: bool = False,
    ) -> HealthCheck:
        return HealthCheck(
            category=self.category,
            name=self.name,
            score=score,
            finding=finding,
            recommendation=recommendation,
            weight=self.weight,
            low_confidence=low_confidence,
            data_points=data_points or {},
        )

    def insufficient_data(
        self,
        snapshot: AccountSnapshot,
        sources: Iterable[DataSource],
        detail: str | None = None,
        data_points: dict[str, Any] | None = None,
    ) -> HealthCheck:
        """Neutral, low-confidence check stating why the category is unscorable.

        Findings distinguish "no records returned" from "source unavailable".
        """
        sources = list(sources)
        reasons = "; ".join(snapshot.describe_missing(s) for s in sources)
        finding = f"Insufficient data: {reasons}." if reasons else "Insufficient data."
        if detail:
            finding = f"{finding} {detail}"

        failed = [
            SOURCE_LABELS[s].lower()
            for s in sources
            if snapshot.source_state(s) == SourceState.UNAVAILABLE
        ]
        if failed:
            recommendation = (
                f"Re-run the analysis once {', '.join(failed)} data can be fetched; "
                "this category was not scored."
            )
        else:
            recommendation = self.no_data_recommendation

        points = {
            "sourceStates": {s.value: snapshot.source_state(s).value for s in sources}
        }
        points.update(data_points or {})
        return self._check(
            NEUTRAL_SCORE, finding, recommendation, points, low_confidence=True
        )

    def low_signal(
        self, finding: str, recommendation: str, data_points: dict[str, Any]
    ) -> HealthCheck:
        """Neutral, low-confidence check when records exist but carry no signal."""
        return self._check(
            NEUTRAL_SCORE,
            f"Insufficient data: {finding}",
            recommendation,
            data_points,
            low_confidence=True,
        )

    def _format_currency(self, amount: float) -> str:
        """Format money amounts consistently.

        Args:
            amount: Amount to format

        Returns:
            Formatted currency string (e.g., "$1,234.56")
        """
        return f"{self.currency_symbol}{amount:,.2f}"

    @staticmethod
    def _pct(part: float, whole: float) -> float:
        """Percentage of ``whole``, 0 when ``whole`` is 0."""
        return (part / whole) * 100 if whole > 0 else 0.0
