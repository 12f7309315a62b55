"""
Service settings and configuration.
Uses pydantic-settings for environment variable loading.
"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT.parent / "data"


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_path: Path = Field(
        default=DATA_DIR / "applications.db",
        description="Path to SQLite database file"
    )

    # Remote services
    user_service_url: str = Field(
        default="http://localhost:8081/api/users",
        description="Base URL for user existence checks"
    )
    job_service_url: str = Field(
        default="http://localhost:8082/api/jobs",
        description="Base URL for job existence checks"
    )
    job_service_base_url: str = Field(
        default="http://localhost:8082",
        description="Job service root, used for applicant count updates"
    )

    # HTTP client settings
    http_user_agent: str = Field(
        default="application-tracking/0.1",
        description="User agent string for outgoing requests"
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP request timeout"
    )
    http_max_retries: int = Field(
        default=3,
        description="Maximum attempts for existence checks on transport errors"
    )

    # Deferred creates
    deferred_tasks_durable: bool = Field(
        default=False,
        description="Persist deferred creates so they survive a restart"
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")


# Global settings instance
settings = Settings()
