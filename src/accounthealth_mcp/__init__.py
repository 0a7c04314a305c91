"""Account Health MCP Server.

Deterministic account health scoring and search term n-gram mining for
Google Ads data, exposed through a Model Context Protocol server.
"""

__version__ = "1.0.0"

from accounthealth_mcp.engine import (  # noqa: E402
    HealthScoreEngine,
    PreAnalysisResult,
    run_pre_analysis,
)
from accounthealth_mcp.server import create_mcp_server  # noqa: E402

__all__ = [
    "HealthScoreEngine",
    "PreAnalysisResult",
    "create_mcp_server",
    "run_pre_analysis",
]
