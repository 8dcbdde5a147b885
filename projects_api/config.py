"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All deployment values come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Blank optional values are None, so "configured" is a simple truthiness check

Design Decisions:
    - Settings assembled once at startup and handed to create_app(): the Guard and
      the database layer never re-read os.environ per request
    - Defaults for every non-secret setting: runs locally with only DATABASE_URL
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore",
    )

    # Database — raw DATABASE_URL, resolved by infrastructure/database.py
    database_url: str | None = None
    database_pool_size: int = 5
    database_max_overflow: int = 5

    # Error reporting
    runtime_error_endpoint_url: str | None = None
    board_id: str | None = None
    api_base_url: str | None = None
    error_report_timeout_seconds: float = 5.0

    # API
    port: int = 8080
    api_prefix: str = "/api/test"
    cors_origins: list[str] = ["*"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator(
        "database_url", "runtime_error_endpoint_url", "board_id", "api_base_url",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        """Railway exposes unset variables as empty strings."""
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("port", mode="before")
    @classmethod
    def default_port_when_blank(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return 8080
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
