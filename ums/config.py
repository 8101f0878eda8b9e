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

    app_name: str = "Army UMS"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://ums:ums@db:5432/ums"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    log_level: str = "INFO"
    log_json: bool = False

    merge_retry_interval_seconds: int = 60
    merge_retry_max_attempts: int = 5
    merge_retry_batch_size: int = 50


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
