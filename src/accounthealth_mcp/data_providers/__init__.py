"""Data providers module for the account health engine.

This module provides the upstream interface the engine consumes:
- AccountDataProvider, the fetch contract for the twelve collections
- collect_snapshot, which fetches every source and normalizes the results
- MockDataProvider, deterministic sample data for tests and demos
"""

from accounthealth_mcp.data_providers.base import AccountDataProvider, collect_snapshot
from accounthealth_mcp.data_providers.mock_provider import MockDataProvider
from accounthealth_mcp.data_providers.normalizer import (
    normalize_collection,
    normalize_snapshot,
)

__all__ = [
    "AccountDataProvider",
    "MockDataProvider",
    "collect_snapshot",
    "normalize_collection",
    "normalize_snapshot",
]
