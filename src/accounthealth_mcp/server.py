"""FastMCP server exposing account health scoring and n-gram mining."""

import asyncio
import logging
import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from fastmcp import FastMCP
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from accounthealth_mcp import __version__
from accounthealth_mcp.analyzers.ngram import (
    expansion_candidates,
    mine_ngrams,
    negative_candidates,
)
from accounthealth_mcp.core.config import Environment, get_settings
from accounthealth_mcp.core.exceptions import (
    ConfigurationError,
    DataError,
    RateLimitError,
)
from accounthealth_mcp.core.logging import configure_logging
from accounthealth_mcp.data_providers.base import AccountDataProvider, collect_snapshot
from accounthealth_mcp.data_providers.mock_provider import MockDataProvider
from accounthealth_mcp.data_providers.normalizer import normalize_snapshot
from accounthealth_mcp.engine import HealthScoreEngine
from accounthealth_mcp.formatters import NGramBlockLimits, format_ngram_block
from accounthealth_mcp.models.snapshot import AccountSnapshot, DataSource, FetchError
from accounthealth_mcp.utils.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 30

# camelCase and snake_case spellings of each source name
_SOURCE_KEYS = {
    **{s.value: s for s in DataSource},
    **{to_camel(s.value): s for s in DataSource},
}


# ============================================================================
# Error Codes
# ============================================================================


class ErrorCode(str, Enum):
    """Error codes for programmatic error handling."""

    INVALID_CUSTOMER_ID = "INVALID_CUSTOMER_ID"
    INVALID_INPUT = "INVALID_INPUT"
    NO_DATA_SOURCE = "NO_DATA_SOURCE"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Initialize MCP server
mcp = FastMCP("Account Health MCP Server")


# ============================================================================
# Helper Functions
# ============================================================================


def sanitize_error_message(msg: str) -> str:
    """Remove potential credentials from error messages.

    Args:
        msg: Original error message

    Returns:
        Sanitized error message with credentials redacted

    Examples:
        >>> sanitize_error_message("Token abc123xyz456abc123xyz456 failed")
        "Token [REDACTED] failed"
        >>> sanitize_error_message("user@example.com authentication failed")
        "[EMAIL_REDACTED] authentication failed"
    """
    # Anything that looks like a token (20+ alphanumeric/dash/underscore)
    msg = re.sub(r"[A-Za-z0-9_-]{20,}", "[REDACTED]", msg)

    msg = re.sub(r"\b[\w.-]+@[\w.-]+\.\w+\b", "[EMAIL_REDACTED]", msg)

    # Customer IDs (10 digits)
    msg = re.sub(r"\b\d{10}\b", "[CUSTOMER_ID_REDACTED]", msg)

    msg = re.sub(
        r"(api[_-]?key|token|secret|password|credential)[\"']?\s*[:=]\s*[\"']?[^\s\"']+",
        r"\1=[REDACTED]",
        msg,
        flags=re.IGNORECASE,
    )

    return msg


# Shared instances, injectable for tests and embedding
_rate_limiter: RateLimiter | None = None
_data_provider: AccountDataProvider | None = None


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    """Install the rate limiter used by every tool."""
    global _rate_limiter
    _rate_limiter = limiter


def reset_rate_limiter_for_testing() -> None:
    """Reset the singleton rate limiter (for testing only)."""
    global _rate_limiter
    _rate_limiter = None


def set_data_provider(provider: AccountDataProvider | None) -> None:
    """Install the provider used when a request names a customer."""
    global _data_provider
    _data_provider = provider


def _get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter.from_settings(get_settings())
    return _rate_limiter


def _get_data_provider() -> AccountDataProvider:
    """Return the installed provider, or sample data outside production.

    Raises:
        ConfigurationError: If no provider is installed in production
    """
    if _data_provider is not None:
        return _data_provider
    if get_settings().environment == Environment.PRODUCTION:
        raise ConfigurationError("No account data provider configured")
    logger.info("No data provider configured, serving sample account data")
    return MockDataProvider()


def validate_customer_id(customer_id: str) -> str:
    """Validate and normalize customer ID format.

    Args:
        customer_id: Customer ID with or without dashes

    Returns:
        Normalized customer ID (10 digits, no dashes)

    Raises:
        ValueError: If customer ID is invalid
    """
    cleaned = customer_id.replace("-", "").replace(" ", "").strip()

    if not cleaned.isdigit():
        raise ValueError(f"Customer ID must contain only digits: {customer_id}")

    if len(cleaned) != 10:
        raise ValueError(
            f"Customer ID must be exactly 10 digits: {customer_id} (got {len(cleaned)})"
        )

    return cleaned


def validate_date_format(date_str: str, field_name: str = "date") -> datetime:
    """Validate date string is in YYYY-MM-DD format.

    Raises:
        ValueError: If date format is invalid
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        raise ValueError(
            f"Invalid {field_name} format: {date_str}. Expected YYYY-MM-DD"
        )


def resolve_date_range(
    start_date: str | None, end_date: str | None
) -> tuple[datetime, datetime]:
    """Parse the requested range, defaulting to the last 30 days.

    Raises:
        ValueError: If a date is malformed or the range is reversed
    """
    end = (
        validate_date_format(end_date, "end_date")
        if end_date
        else datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    )
    start = (
        validate_date_format(start_date, "start_date")
        if start_date
        else end - timedelta(days=DEFAULT_LOOKBACK_DAYS)
    )
    if start > end:
        raise ValueError("start_date must be before end_date")
    return start, end


def _error_response(
    code: ErrorCode, message: str, details: dict[str, Any]
) -> dict[str, Any]:
    return {
        "status": "error",
        "error_code": code,
        "message": message,
        "details": details,
    }


def _handle_tool_error(e: Exception) -> dict[str, Any]:
    """Map an exception raised inside a tool onto an error response."""
    if isinstance(e, RateLimitError):
        logger.warning(f"Rate limit exceeded: {sanitize_error_message(str(e))}")
        return _error_response(
            ErrorCode.RATE_LIMIT_EXCEEDED,
            "Rate limit exceeded. Please try again later.",
            {
                "error_type": "rate_limit",
                "retry_allowed": True,
                "retry_after_seconds": int(e.retry_after) + 1,
            },
        )
    if isinstance(e, ConfigurationError):
        logger.error(f"Configuration error: {sanitize_error_message(str(e))}")
        return _error_response(
            ErrorCode.CONFIGURATION_ERROR,
            f"Server configuration error: {sanitize_error_message(str(e))}",
            {"error_type": "configuration", "retry_allowed": False},
        )
    if isinstance(e, DataError):
        logger.error(f"No usable data: {sanitize_error_message(str(e))}")
        return _error_response(
            ErrorCode.NO_DATA_SOURCE,
            sanitize_error_message(str(e)),
            {"error_type": "data", "retry_allowed": False},
        )
    if isinstance(e, ValueError):
        logger.error(f"Invalid input: {sanitize_error_message(str(e))}")
        code = (
            ErrorCode.INVALID_CUSTOMER_ID
            if "Customer ID" in str(e)
            else ErrorCode.INVALID_INPUT
        )
        return _error_response(
            code,
            f"Invalid input: {str(e)}",
            {"error_type": "validation", "retry_allowed": False},
        )
    logger.error(f"Unexpected error: {sanitize_error_message(str(e))}", exc_info=True)
    return _error_response(
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred. Please contact support if this persists.",
        {"error_type": "unexpected"},
    )


# ============================================================================
# Models
# ============================================================================


class AccountDataRequest(BaseModel):
    """Where the account data comes from.

    Either pass the collections inline in ``data`` (keyed by source name in
    snake_case or camelCase), or name a ``customer_id`` to fetch them through
    the configured data provider.
    """

    customer_id: str | None = Field(
        None, description="Google Ads customer ID (without dashes)"
    )
    start_date: str | None = Field(None, description="Start date, YYYY-MM-DD")
    end_date: str | None = Field(None, description="End date, YYYY-MM-DD")
    data: dict[str, list[dict[str, Any]]] | None = Field(
        None, description="Inline collections keyed by source name"
    )
    unavailable: dict[str, str] = Field(
        default_factory=dict,
        description="Sources whose upstream fetch failed, with the error message",
    )


class AccountHealthRequest(AccountDataRequest):
    """Request model for the account health tool."""


class NGramRequest(AccountDataRequest):
    """Request model for the n-gram analysis tool."""

    min_cost: float | None = Field(
        None, ge=0, description="Minimum spend for negative keyword candidates"
    )
    min_roas: float | None = Field(
        None, ge=0, description="Minimum ROAS for expansion candidates"
    )


def _parse_source(name: str) -> DataSource:
    source = _SOURCE_KEYS.get(name)
    if source is None:
        raise ValueError(f"Unknown data source: {name}")
    return source


async def _load_snapshot(request: AccountDataRequest) -> AccountSnapshot:
    """Build the snapshot from inline data or the configured provider.

    Raises:
        ValueError: On malformed ids, dates or source names
        DataError: If the request names neither data nor a customer
    """
    if request.data is not None:
        collections: dict[str, Any] = {}
        for name, records in request.data.items():
            collections[_parse_source(name).value] = records
        for name, message in request.unavailable.items():
            source = _parse_source(name)
            collections[source.value] = FetchError(
                source=source.value, message=message
            )
        return normalize_snapshot(**collections)

    if not request.customer_id:
        raise DataError("Provide either inline data or a customer_id")

    customer_id = validate_customer_id(request.customer_id)
    start, end = resolve_date_range(request.start_date, request.end_date)
    return await collect_snapshot(_get_data_provider(), customer_id, start, end)


def _rate_limit_key(request: AccountDataRequest) -> str:
    return request.customer_id or "inline"


# ============================================================================
# Tools
# ============================================================================


@mcp.tool()
async def get_account_health(request: AccountHealthRequest) -> dict[str, Any]:
    """
    Score account health across ten categories and mine search term n-grams.

    Returns the dashboard payload (overall score, grade, summary, per-category
    checks, search terms) plus the healthBlock and ngramBlock text ready for
    prompt injection. Missing or failed sources lower confidence in the
    affected categories; they never fail the request.
    """
    try:
        await _get_rate_limiter().enforce(_rate_limit_key(request))
        snapshot = await _load_snapshot(request)
        result = await asyncio.to_thread(HealthScoreEngine().run, snapshot)

        logger.info(
            f"Account health computed: score={result.health_score.overall_score}, "
            f"unavailable={sorted(snapshot.unavailable)}"
        )
        payload = result.to_dashboard()
        payload["metadata"] = {
            "customer_id": request.customer_id,
            "record_counts": snapshot.record_counts(),
            "unavailable_sources": snapshot.unavailable,
        }
        return payload

    except Exception as e:
        return _handle_tool_error(e)


def _ngram_payload(request: NGramRequest, snapshot: AccountSnapshot) -> dict[str, Any]:
    """Mine, filter and render n-grams; CPU-bound, run off the event loop."""
    settings = get_settings()
    result = mine_ngrams(snapshot.search_terms)
    negatives = negative_candidates(
        result,
        min_cost=(
            settings.negative_min_cost
            if request.min_cost is None
            else request.min_cost
        ),
        min_count=settings.negative_min_count,
        existing_negatives=snapshot.negative_keywords,
    )
    expansions = expansion_candidates(
        result,
        min_count=settings.expansion_min_count,
        min_roas=(
            settings.expansion_min_roas
            if request.min_roas is None
            else request.min_roas
        ),
        existing_keywords=[k.text for k in snapshot.keywords],
    )
    block = format_ngram_block(
        result,
        negatives,
        expansions,
        limits=NGramBlockLimits.from_settings(settings),
        currency_symbol=settings.currency_symbol,
        snapshot=snapshot,
    )
    return {
        "status": "success",
        "message": (
            f"Mined {len(result.all_grams())} patterns from "
            f"{result.search_terms_analyzed} search terms"
        ),
        "ngramAnalysis": result.model_dump(by_alias=True, mode="json"),
        "negativeCandidates": [
            m.model_dump(by_alias=True, mode="json") for m in negatives
        ],
        "expansionCandidates": [
            m.model_dump(by_alias=True, mode="json") for m in expansions
        ],
        "ngramBlock": block,
    }


@mcp.tool()
async def get_ngram_analysis(request: NGramRequest) -> dict[str, Any]:
    """
    Mine 1/2/3-word patterns from the search terms report.

    Returns gram tables sorted by spend, the top winning and wasteful
    patterns, negative keyword and expansion candidates, and the ngramBlock
    text.
    """
    try:
        await _get_rate_limiter().enforce(_rate_limit_key(request))
        snapshot = await _load_snapshot(request)
        return await asyncio.to_thread(_ngram_payload, request, snapshot)

    except Exception as e:
        return _handle_tool_error(e)


# ============================================================================
# Resources
# ============================================================================


@mcp.resource("resource://health")
def health_check() -> dict[str, Any]:
    """
    Provides server health status.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "server": "Account Health MCP Server",
        "data_provider_configured": _data_provider is not None,
        "tools_available": ["get_account_health", "get_ngram_analysis"],
    }


@mcp.resource("resource://config")
def get_config() -> dict[str, Any]:
    """
    Provides the server's configuration (without exposing secrets).
    """
    settings = get_settings()
    return {
        "server_version": __version__,
        "environment": settings.environment.value,
        "engine": {
            "parallel_evaluation": settings.parallel_evaluation,
            "max_workers": settings.max_workers,
            "category_weights": {
                c.value: w for c, w in settings.resolved_weights().items()
            },
            "currency_symbol": settings.currency_symbol,
        },
        "rate_limiting": {
            "backend": settings.rate_limit_backend.value,
            "requests": settings.rate_limit_requests,
            "window_seconds": settings.rate_limit_window_seconds,
        },
    }


# ============================================================================
# Server Factory
# ============================================================================


def create_mcp_server() -> FastMCP:
    """
    Create and return the configured MCP server instance.

    Returns:
        FastMCP: The configured server instance ready to run.
    """
    return mcp


# ============================================================================
# Entry Point
# ============================================================================


def main() -> None:
    """Run the server over stdio."""
    configure_logging(get_settings())
    mcp.run()


if __name__ == "__main__":
    main()
