"""Application settings using Pydantic for environment-based configuration."""
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_name: str = Field(default="order-pipeline", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/production)")
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    # Per-order configuration file
    order_config_path: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("order_config_path", "legacy_order_config"),
        description="Order config path taking priority over the default path",
    )
    default_config_path: str = Field(
        default="order_config.json", description="Fallback order config path"
    )
    force_offline: bool = Field(
        default=False,
        description="Force offline mode when the order config cannot be read",
    )

    # Audit trail
    default_audit_path: str = Field(
        default="audit.log", description="Audit file used when the config names none"
    )

    # Invocation stamping
    default_actor: str = Field(
        default="unknown",
        validation_alias=AliasChoices("default_actor", "user"),
        description="Actor recorded as started_by when the caller supplies none",
    )

    # Collaborator timeouts
    payment_timeout_seconds: float = Field(
        default=30.0, description="Timeout for a single payment charge (seconds)"
    )
    notification_timeout_seconds: float = Field(
        default=10.0, description="Timeout for a single notification send (seconds)"
    )

    # Finalization
    default_completion_delay_ms: float = Field(
        default=200.0, description="Delay before an order is marked completed (ms)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()

    @field_validator("payment_timeout_seconds", "notification_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Timeouts must be positive."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
