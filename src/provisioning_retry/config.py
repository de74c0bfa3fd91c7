"""
Configuration settings for the provisioning retry layer.

Settings only drive the ambient pieces (logging, metrics, the retry loop).
Predicates and pipelines read no configuration.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry loop ===
    MAX_RETRIES: int = 3
    RETRY_BACKOFF_BASE: float = 2.0  # Exponential backoff multiplier
    RETRY_MAX_DELAY_SECONDS: float = 60.0  # Cap for computed backoff
    RETRY_MAX_HINT_SECONDS: float = 600.0  # Cap for Retry-After / predicate hints

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance, the default for RetryEngine and configure_from_settings
settings = Settings()
