"""Configuration management for the account health engine."""

import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from accounthealth_mcp.models.health import DEFAULT_CATEGORY_WEIGHTS, HealthCategory


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    TEXT = "text"


class RateLimitBackend(str, Enum):
    """Rate limit store backends."""

    MEMORY = "memory"
    REDIS = "redis"


class HealthEngineSettings(BaseSettings):
    """Settings for the health engine and its MCP surface.

    Environment Variables:
        AH_ENVIRONMENT=development
        AH_LOG_LEVEL=INFO
        AH_LOG_FORMAT=text              (or json)
        AH_PARALLEL_EVALUATION=false
        AH_MAX_WORKERS=4
        AH_CATEGORY_WEIGHTS='{"QUALITY_SCORE": 3.0}'
        AH_CURRENCY_SYMBOL=$
        AH_RATE_LIMIT_BACKEND=memory    (or redis)
        AH_REDIS_URL=redis://localhost:6379/0
    """

    model_config = SettingsConfigDict(
        env_prefix="AH_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Environment.DEVELOPMENT
    log_level: str = Field(default="INFO", description="Root log level")
    log_format: LogFormat = LogFormat.TEXT

    # Engine
    parallel_evaluation: bool = Field(
        default=False, description="Run evaluators on a thread pool"
    )
    max_workers: int = Field(default=4, ge=1, le=32)
    category_weights: dict[str, float] = Field(
        default_factory=dict,
        description="Overrides of the default per-category weights",
    )

    # Block formatting
    currency_symbol: str = Field(default="$", max_length=3)
    one_gram_rows: int = Field(default=20, ge=1)
    two_gram_rows: int = Field(default=15, ge=1)
    three_gram_rows: int = Field(default=10, ge=1)
    candidate_rows: int = Field(default=15, ge=1)
    expansion_rows: int = Field(default=10, ge=1)

    # N-gram candidate thresholds
    negative_min_cost: float = Field(default=1.0, ge=0)
    negative_min_count: int = Field(default=2, ge=1)
    expansion_min_count: int = Field(default=2, ge=1)
    expansion_min_roas: float = Field(default=2.0, ge=0)

    # Rate limiting
    rate_limit_requests: int = Field(default=30, ge=1)
    rate_limit_window_seconds: int = Field(default=60, ge=1)
    rate_limit_backend: RateLimitBackend = RateLimitBackend.MEMORY
    redis_url: str = Field(default="redis://localhost:6379/0")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("category_weights")
    @classmethod
    def validate_category_weights(cls, v: dict[str, float]) -> dict[str, float]:
        """Reject unknown categories and negative weights."""
        known = {c.value for c in HealthCategory}
        cleaned: dict[str, float] = {}
        for name, weight in v.items():
            key = name.upper()
            if key not in known:
                raise ValueError(f"Unknown health category: {name}")
            if weight < 0:
                raise ValueError(f"Weight for {key} must be non-negative, got {weight}")
            cleaned[key] = float(weight)
        return cleaned

    @model_validator(mode="after")
    def validate_weights_total(self) -> "HealthEngineSettings":
        """Ensure at least one category carries weight."""
        merged = self.resolved_weights()
        if sum(merged.values()) <= 0:
            raise ValueError("At least one category weight must be positive")
        return self

    def resolved_weights(self) -> dict[HealthCategory, float]:
        """Default weights overlaid with any configured overrides."""
        weights = dict(DEFAULT_CATEGORY_WEIGHTS)
        for name, weight in self.category_weights.items():
            weights[HealthCategory(name)] = weight
        return weights

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "HealthEngineSettings":
        """Load settings from the environment, reading a .env file first."""
        if env_file:
            load_dotenv(env_file)
        else:
            env_path = Path.cwd() / ".env"
            if env_path.exists():
                load_dotenv(env_path)
        return cls()


@lru_cache
def get_settings() -> HealthEngineSettings:
    """Get cached settings instance."""
    try:
        return HealthEngineSettings.from_env()
    except (ValidationError, ValueError) as e:
        logging.error(f"Configuration error: {e}")
        raise
