"""Text block formatters for downstream prompt injection."""

from accounthealth_mcp.formatters.cells import fixed, sanitize_cell
from accounthealth_mcp.formatters.health_block import format_health_block
from accounthealth_mcp.formatters.ngram_block import (
    NGramBlockLimits,
    format_ngram_block,
)

__all__ = [
    "NGramBlockLimits",
    "fixed",
    "format_health_block",
    "format_ngram_block",
    "sanitize_cell",
]
