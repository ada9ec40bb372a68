"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # CRM database (primary store: humans, emails, phones, activities)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")

    # Website database (secondary store: announcement signups, bookings)
    WEBSITE_SUPABASE_URL: str = ""
    WEBSITE_SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")

    # Front messaging platform
    FRONT_API_TOKEN: SecretStr = SecretStr("")
    FRONT_API_BASE_URL: str = "https://api2.frontapp.com"
    FRONT_REQUEST_TIMEOUT_SECONDS: float = 30.0
    FRONT_SYNC_DEFAULT_LIMIT: int = 20
    FRONT_SYNC_MAX_LIMIT: int = 50

    # Application Settings
    APP_ENV: Literal["development", "staging", "production"] = "development"

    # Logging
    LOG_FORMAT: Literal["text", "json"] = "text"
    LOG_LEVEL: str = "INFO"

    # CORS Configuration
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @field_validator("SUPABASE_URL", "WEBSITE_SUPABASE_URL", "FRONT_API_BASE_URL")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that service URLs are http(s) URLs without a trailing slash."""
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip("/") if v else v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.APP_ENV == "production"

    @property
    def front_configured(self) -> bool:
        """Check if a Front API token is available for syncing."""
        return bool(self.FRONT_API_TOKEN.get_secret_value())

    @property
    def website_store_configured(self) -> bool:
        """Check if the website database credentials are set."""
        return bool(
            self.WEBSITE_SUPABASE_URL and self.WEBSITE_SUPABASE_SERVICE_ROLE_KEY.get_secret_value()
        )

    def validate_startup(self) -> None:
        """Validate that all required secrets are configured.

        The Front token is not checked here; the sync route reports a
        missing token as a sync failure.

        Raises:
            ValueError: If any required secret is missing or empty.
        """
        required_secrets = {
            "SUPABASE_URL": self.SUPABASE_URL,
            "SUPABASE_SERVICE_ROLE_KEY": self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
            "WEBSITE_SUPABASE_URL": self.WEBSITE_SUPABASE_URL,
            "WEBSITE_SUPABASE_SERVICE_ROLE_KEY": (
                self.WEBSITE_SUPABASE_SERVICE_ROLE_KEY.get_secret_value()
            ),
        }
        missing = [name for name, value in required_secrets.items() if not value]
        if missing:
            raise ValueError(f"Required secrets are missing or empty: {', '.join(missing)}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from the environment.
    """
    return Settings()


# Global settings instance - import this for easy access
settings = get_settings()
