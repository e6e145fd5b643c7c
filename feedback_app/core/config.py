"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application environment
    env: Literal["dev", "test", "staging", "prod"] = "dev"

    # Database
    database_url: str = "sqlite+aiosqlite:///./feedback.db"

    # Logging
    log_level: str = "INFO"

    # Database initialization (create tables + seed the default form)
    init_db_on_startup: bool = False

    # Form served to respondents
    form_slug: str = "feedback"
    form_definition_file: str = "isp-feedback-v1.yaml"

    # Entry question answer that always raises the priority flag
    entry_category_tag: str = "entry"
    urgent_path_marker: str = "PATH_D"

    # Duplicate detection window for repeat phone numbers
    duplicate_window_hours: int = 24

    # Ordered lowest -> highest. Only the ranks matter to tier classification.
    price_bands: list[str] = ["lt_5000", "5000_10000", "10000_15000", "gt_15000"]
    usage_bands: list[str] = ["lt_10gb", "10_25gb", "25_50gb", "gt_50gb"]

    # Value written to responses.source for live submissions
    submission_source: str = "live_form"

    # The public form is embedded on third-party pages
    cors_allow_origins: list[str] = ["*"]

    @property
    def database_url_sync(self) -> str:
        """Return sync database URL for Alembic."""
        return self.database_url.replace("+asyncpg", "+psycopg2").replace(
            "+aiosqlite", ""
        )

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode."""
        return self.env == "dev"

    @property
    def is_prod(self) -> bool:
        """Check if running in production mode."""
        return self.env == "prod"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
