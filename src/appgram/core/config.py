"""
SDK configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
Values passed explicitly to AppgramProvider take precedence.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "appgram-sdk"
    DEBUG: bool = False

    # Remote service
    APPGRAM_API_URL: str = "https://api.appgram.dev"
    APPGRAM_PROJECT_ID: str = ""
    APPGRAM_ORG_SLUG: str | None = None  # Required by release endpoints
    APPGRAM_PROJECT_SLUG: str | None = None

    # None keeps the httpx default timeout
    REQUEST_TIMEOUT_SECONDS: float | None = None

    # Anonymous identity
    ENABLE_FINGERPRINTING: bool = True
    FINGERPRINT_STORAGE_KEY: str = "appgram_fingerprint"
    FINGERPRINT_STORAGE_PATH: str = "~/.appgram/storage.json"

    # Uploads (10 MiB per file)
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Pagination defaults used when the server omits per_page
    DEFAULT_PER_PAGE: int = 20
    BLOG_PER_PAGE: int = 10
    RELEASES_LIMIT: int = 50

    @field_validator("APPGRAM_API_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove a trailing slash so paths can be appended directly."""
        return v.rstrip("/")

    @field_validator("MAX_UPLOAD_BYTES")
    @classmethod
    def validate_upload_ceiling(cls, v: int) -> int:
        """Upload ceiling must be positive."""
        if v <= 0:
            raise ValueError("MAX_UPLOAD_BYTES must be greater than zero")
        return v

    @property
    def user_agent(self) -> str:
        """User agent sent with every request."""
        return f"{self.APP_NAME}/1.0"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
