"""N-gram analysis models."""

from pydantic import Field, computed_field

from accounthealth_mcp.models.health import HealthModel


class NGramMetrics(HealthModel):
    """Aggregated metrics for one gram across all search terms containing it."""

    gram: str = Field(..., description="Lowercased, trimmed gram text")
    n: int = Field(default=1, ge=1, le=3, description="Words in the gram")
    count: int = Field(default=0, ge=0, description="Contributing occurrences")
    clicks: float = 0.0
    cost: float = 0.0
    conversions: float = 0.0
    conversion_value: float = 0.0

    @computed_field  # type: ignore[misc]
    @property
    def roas(self) -> float:
        """Conversion value per unit of cost, 0 when there is no cost."""
        return self.conversion_value / self.cost if self.cost > 0 else 0.0

    @computed_field  # type: ignore[misc]
    @property
    def cpa(self) -> float:
        """Cost per conversion, 0 when there are no conversions."""
        return self.cost / self.conversions if self.conversions > 0 else 0.0


class NGramAnalysisResult(HealthModel):
    """Result of mining 1/2/3-grams from a search term report."""

    one_grams: list[NGramMetrics] = Field(default_factory=list)
    two_grams: list[NGramMetrics] = Field(default_factory=list)
    three_grams: list[NGramMetrics] = Field(default_factory=list)
    top_winning: list[NGramMetrics] = Field(default_factory=list)
    top_wasteful: list[NGramMetrics] = Field(default_factory=list)
    search_terms_analyzed: int = Field(default=0, ge=0)

    def all_grams(self) -> list[NGramMetrics]:
        return [*self.one_grams, *self.two_grams, *self.three_grams]

    @property
    def is_empty(self) -> bool:
        return not (self.one_grams or self.two_grams or self.three_grams)
