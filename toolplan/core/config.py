"""
Core configuration module for the Tool Plan Engine.

Every tunable of the planner, the executor and the audit backend lives on
Settings, loaded from environment variables with the TOOLPLAN_ prefix.

Pattern: Pydantic BaseSettings with a cached singleton accessor
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Engine settings read from TOOLPLAN_* environment variables.

    All fields use the TOOLPLAN_ prefix for environment variables.
    Example: TOOLPLAN_TOOL_TIMEOUT_SECONDS=10
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="tool-plan-engine",
        description="Name of the service for logging and identification",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for structured logging",
    )

    # =========================================================================
    # Completion Model (Planner) Configuration
    # SecretStr masks values in logs/repr, use .get_secret_value() to access
    # =========================================================================
    gemini_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Google AI API key used by the planner",
    )
    gemini_model: str = Field(
        default="gemini-1.5-pro",
        description="Model identifier used for plan generation",
    )
    gemini_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API",
    )
    planner_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for plan generation",
    )
    planner_timeout_seconds: float = Field(
        default=120.0,
        ge=1.0,
        le=600.0,
        description="Timeout in seconds for the planning completion call",
    )

    # =========================================================================
    # Planning Limits
    # =========================================================================
    email_body_max_chars: int = Field(
        default=8000,
        ge=1,
        description="Maximum number of email body characters sent to the planner",
    )
    schema_max_depth: int = Field(
        default=6,
        ge=1,
        le=32,
        description="Recursion cap when synthesizing examples from tool schemas",
    )
    strict_argument_names: bool = Field(
        default=False,
        description="Drop plan arguments whose names are not declared by the tool",
    )

    # =========================================================================
    # Tool Invocation
    # =========================================================================
    tool_timeout_seconds: float = Field(
        default=30.0,
        ge=0.1,
        le=300.0,
        description="Timeout in seconds for a single tool invocation",
    )
    tool_gateway_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Shared key sent as x-internal-api-key on every tool call",
    )

    # =========================================================================
    # Audit Configuration
    # =========================================================================
    audit_backend: Literal["logging", "memory", "redis"] = Field(
        default="logging",
        description="Where planning and execution audit records are written",
    )
    redis_url: str = Field(
        default="redis://localhost:6379",
        description="Redis connection URL for the redis audit backend",
    )

    model_config = {
        "env_prefix": "TOOLPLAN_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Field Validators
    # =========================================================================
    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://")):
            raise ValueError("Redis URL must start with redis:// or rediss://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if level not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return level


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide Settings instance.

    Built on first call and cached by lru_cache.
    Tests call get_settings.cache_clear() after patching the environment.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
