"""Configuration settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Telegram Bot
    bot_token: str

    # Database
    database_url: str

    # Redis (change notifications)
    redis_url: str = "redis://localhost:6379/0"
    change_channel_prefix: str = "dealradar"

    # Geolocation
    geolocation_timeout_seconds: float = 10.0
    geolocation_max_age_seconds: float = 300.0
    geolocation_high_accuracy: bool = True

    # Discovery
    default_radius_km: float = 10.0
    deals_page_size: int = 5

    # Sessions
    session_idle_ttl_seconds: float = 1800.0
    session_sweep_interval_seconds: float = 300.0

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "deal-radar"
    environment: str = "development"


def load_settings() -> Settings:
    """Load and validate settings from environment."""
    return Settings()  # type: ignore[call-arg]
