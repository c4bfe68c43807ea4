"""
Havyn Application Settings

Production-grade configuration management using Pydantic Settings.
All sensitive values are loaded from environment variables.

SECURITY: Never log or expose settings containing secrets.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """User-account store database configuration."""

    model_config = SettingsConfigDict(env_prefix="HAVYN_DB_")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="havyn_db", description="Database name")
    user: str = Field(default="havyn_user", description="Database user")
    password: SecretStr = Field(default=SecretStr("dev_password"), description="Database password")
    pool_size: int = Field(default=10, ge=1, le=100, description="Connection pool size")
    max_overflow: int = Field(default=20, ge=0, le=100, description="Max overflow connections")
    url: Optional[str] = Field(
        default=None,
        description="Full async URL override (e.g. sqlite+aiosqlite:///./havyn.db)",
    )

    @property
    def async_url(self) -> str:
        """Generate async database URL for SQLAlchemy."""
        if self.url:
            return self.url
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class EmailSettings(BaseSettings):
    """Transactional email provider (Resend) configuration."""

    model_config = SettingsConfigDict(env_prefix="HAVYN_EMAIL_")

    api_key: SecretStr = Field(default=SecretStr(""), description="Resend API key")
    api_url: str = Field(default="https://api.resend.com", description="Resend API base URL")
    sender: str = Field(
        default="Heavenly Crisis Alert <alerts@resend.dev>",
        description="From header used for crisis alerts",
    )
    timeout_seconds: float = Field(default=10.0, gt=0.0, le=120.0)


class AlertSettings(BaseSettings):
    """Crisis alert pipeline configuration."""

    model_config = SettingsConfigDict(env_prefix="HAVYN_ALERT_")

    default_helpline_email: str = Field(
        default="support@1life.org.in",
        description="Fallback recipient when no guardian is configured",
    )
    national_helpline_name: str = Field(
        default="National Suicide Prevention Helpline (India)",
    )
    national_helpline_number: str = Field(default="14416")
    location_timeout_seconds: float = Field(default=5.0, gt=0.0, le=60.0)
    retry_delay_seconds: float = Field(default=30.0, ge=0.0, le=600.0)
    maps_base_url: str = Field(default="https://www.google.com/maps?q=")
    system_name: str = Field(default="Heavenly Safety System")
    shutdown_grace_seconds: float = Field(
        default=35.0,
        ge=0.0,
        description="How long shutdown waits for in-flight alerts (covers one retry)",
    )


class LLMSettings(BaseSettings):
    """Conversational LLM configuration (any OpenAI-compatible endpoint)."""

    model_config = SettingsConfigDict(env_prefix="HAVYN_LLM_")

    api_key: SecretStr = Field(default=SecretStr(""), description="LLM API key")
    base_url: str = Field(default="https://api.x.ai/v1", description="OpenAI-compatible base URL")
    model: str = Field(default="grok-3-mini", description="Model identifier")
    max_tokens: int = Field(default=1000, ge=50, le=4096)
    temperature: float = Field(default=0.9, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    history_limit: int = Field(default=10, ge=0, le=50, description="Prior turns sent to the model")
    max_input_chars: int = Field(default=4000, ge=100, le=100_000, description="Longest user text sent to the model")


class Settings(BaseSettings):
    """
    Main application settings.

    All configuration is loaded from environment variables with HAVYN_ prefix.
    Sensitive values use SecretStr to prevent accidental logging.

    Usage:
        settings = get_settings()
        delay = settings.alert.retry_delay_seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="HAVYN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode - NEVER enable in production")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    api_version: str = Field(default="v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    alert: AlertSettings = Field(default_factory=AlertSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.
    For testing, use dependency injection to override.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
