"""Analyzers module for the account health engine.

This module contains the ten category evaluators that score a normalized
account snapshot, the aggregator that combines them into a report, and the
n-gram miner for search terms.
"""

from accounthealth_mcp.analyzers.ad_strength import AdStrengthEvaluator
from accounthealth_mcp.analyzers.aggregator import aggregate_report
from accounthealth_mcp.analyzers.base import BaseHealthEvaluator
from accounthealth_mcp.analyzers.budget_efficiency import BudgetEfficiencyEvaluator
from accounthealth_mcp.analyzers.conversion_tracking import (
    ConversionTrackingEvaluator,
)
from accounthealth_mcp.analyzers.device_performance import DevicePerformanceEvaluator
from accounthealth_mcp.analyzers.impression_share import ImpressionShareEvaluator
from accounthealth_mcp.analyzers.market_competition import MarketCompetitionEvaluator
from accounthealth_mcp.analyzers.match_type import MatchTypeEvaluator
from accounthealth_mcp.analyzers.negative_keywords import (
    NegativeIndex,
    NegativeKeywordEvaluator,
)
from accounthealth_mcp.analyzers.ngram import (
    expansion_candidates,
    mine_ngrams,
    negative_candidates,
)
from accounthealth_mcp.analyzers.quality_score import QualityScoreEvaluator
from accounthealth_mcp.analyzers.structure import StructureEvaluator

# One evaluator per category, in report order
EVALUATOR_CLASSES: list[type[BaseHealthEvaluator]] = [
    ConversionTrackingEvaluator,
    QualityScoreEvaluator,
    AdStrengthEvaluator,
    ImpressionShareEvaluator,
    BudgetEfficiencyEvaluator,
    StructureEvaluator,
    NegativeKeywordEvaluator,
    MatchTypeEvaluator,
    DevicePerformanceEvaluator,
    MarketCompetitionEvaluator,
]

__all__ = [
    "EVALUATOR_CLASSES",
    "AdStrengthEvaluator",
    "BaseHealthEvaluator",
    "BudgetEfficiencyEvaluator",
    "ConversionTrackingEvaluator",
    "DevicePerformanceEvaluator",
    "ImpressionShareEvaluator",
    "MarketCompetitionEvaluator",
    "MatchTypeEvaluator",
    "NegativeIndex",
    "NegativeKeywordEvaluator",
    "QualityScoreEvaluator",
    "StructureEvaluator",
    "aggregate_report",
    "expansion_candidates",
    "mine_ngrams",
    "negative_candidates",
]
