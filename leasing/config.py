"""Application configuration from environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./leasing.db",
        description="SQLAlchemy connection string (sync form; async driver is derived)",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file path")

    # API
    api_title: str = Field(default="Leasing API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used by the REST entity store client",
    )

    # Read-model cache
    view_cache_ttl_seconds: float = Field(
        default=30.0, description="Seconds a cached read model stays valid"
    )

    # Billing
    default_currency: str = Field(default="MXN", description="Currency when none is given")

    # Calendar
    calendar_page_size: int = Field(default=5, description="Events per page in the day view")
    agenda_days: int = Field(default=7, description="Days covered by the agenda view")


# Global settings instance
settings = Settings()
