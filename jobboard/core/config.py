"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "job_board"
    mongodb_timeout_ms: int = 5000

    # Caller identity (tokens are issued by the identity provider)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"

    # Pagination
    jobs_per_page: int = 4
    applications_per_page: int = 10

    # Outbound mail hook
    notifications_enabled: bool = True
    mail_sender: str = "no-reply@jobboard.local"

    # App
    log_level: str = "INFO"
    debug: bool = False

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
