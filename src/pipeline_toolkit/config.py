"""
Configuration settings for the CI pipeline toolkit.

All settings are loaded from environment variables with sensible defaults.
Use a .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "CI Pipeline Toolkit"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "test" swaps in zero-delay sleeps

    # === GitHub ===
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TOKEN: Optional[str] = None
    GITHUB_TIMEOUT: int = 30  # seconds
    REPOSITORY_OWNER: str = ""
    REPOSITORY_NAME: str = ""
    MERGE_METHOD: str = "merge"  # merge, squash or rebase

    # === Retry & Backoff ===
    CAN_RETRY_AUTOMERGE: bool = True  # False = single merge attempt, no backoff
    RETRY_CEILING_SECONDS: int = 180  # Elapsed-time ceiling for long retries
    RETRY_MIN_DELAY_MS: int = 10000
    RETRY_MAX_DELAY_MS: int = 30000
    RETRY_MAX_JITTER_MS: int = 5000  # Desynchronizes parallel pipeline runs

    # === Redis & Celery ===
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"
    CELERY_TASK_TIME_LIMIT: int = 600  # seconds, must exceed RETRY_CEILING_SECONDS
    CELERY_WORKER_CONCURRENCY: int = 4

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True
    METRICS_PORT: int = 9090


# Global settings instance
settings = Settings()
