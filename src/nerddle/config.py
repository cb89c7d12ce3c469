"""Application configuration using Pydantic Settings."""

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADMIN_PASSWORD = "gyatt123"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App settings
    app_name: str = "Nerddle"
    debug: bool = False
    log_level: str = "INFO"

    # Durable medium
    database_url: str = "sqlite:///./nerddle.db"

    # Seeded administrator (created on first access to an empty store)
    seed_admin_username: str = "gyatt123"
    seed_admin_password: str = DEFAULT_ADMIN_PASSWORD
    seed_admin_email: str = "admin@nerddle.local"
    seed_admin_fullname: str = "Gyatt Admin"
    seed_admin_bio: str = "Founder & Admin"

    # Blogging
    post_cooldown_seconds: int = 3600

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level names a standard logging level."""
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return level

    @field_validator("post_cooldown_seconds")
    @classmethod
    def validate_cooldown(cls, v: int) -> int:
        """Validate the posting cooldown is not negative."""
        if v < 0:
            raise ValueError("POST_COOLDOWN_SECONDS must not be negative")
        return v

    def validate_runtime_config(self) -> list[str]:
        """Validate runtime configuration and return warnings."""
        warnings = []

        if self.seed_admin_password == DEFAULT_ADMIN_PASSWORD:
            warnings.append(
                "SEED_ADMIN_PASSWORD is the default value - change it before sharing this client"
            )

        if self.database_url in ("sqlite://", "sqlite:///:memory:"):
            warnings.append("DATABASE_URL is in-memory - nothing will survive a restart")

        if self.debug:
            warnings.append("DEBUG mode is enabled - SQL statements will be echoed")

        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
