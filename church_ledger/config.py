"""Application configuration from environment variables."""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(
        default="sqlite:///./church_ledger.db",
        description="SQLAlchemy connection string (SQLite file or PostgreSQL)",
    )
    database_echo: bool = Field(default=False, description="Log SQL queries")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str = Field(default="logs/server.log", description="Server log file path")

    # Form relay / automation webhooks
    webhook_secret: str = Field(
        default="change-this-secret",
        description="Shared secret expected in X-Webhook-Secret for relayed submissions",
    )

    # Google Sheets export
    google_credentials_path: str = Field(
        default="config/google-credentials.json",
        description="Path to service account JSON credentials",
    )
    google_spreadsheet_id: str | None = Field(default=None, description="Target spreadsheet ID")

    # Default fund split when no budget plan exists for a year
    default_shared_percentage: float = Field(default=10.0)
    default_pastoral_percentage: float = Field(default=10.0)
    default_operational_percentage: float = Field(default=80.0)

    # API
    api_title: str = Field(default="Church Ledger API", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")


# Global settings instance
settings = Settings()
