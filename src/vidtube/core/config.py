"""Configuration management for VidTube.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. A single Settings instance is built at
startup and handed to the services that need it; nothing below the API layer
reads the environment directly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDTUBE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "VidTube"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    external_url: str = "http://localhost:8000"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./vt_data/vidtube.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Settings
    access_token_secret: str | None = Field(
        default=None,
        description="Secret used to sign access tokens",
    )
    access_token_expire_minutes: int = 60
    refresh_token_secret: str | None = Field(
        default=None,
        description="Secret used to sign refresh tokens",
    )
    refresh_token_expire_days: int = 10
    jwt_issuer: str = "vidtube"
    revoke_sessions_on_password_change: bool = False

    # Cookie Settings
    access_token_cookie: str = "accessToken"
    refresh_token_cookie: str = "refreshToken"
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"

    # CORS Settings
    cors_origins: list[str] = Field(default=["http://localhost:3000", "http://localhost:5173"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Media Storage Settings
    media_provider: Literal["local", "s3"] = "local"
    storage_path: str = "./vt_data/media"
    upload_tmp_dir: str = "./vt_data/tmp"
    media_url_path: str = "/media"
    max_file_size: int = 10 * 1024 * 1024  # 10MB in bytes
    allowed_mime_types: list[str] = Field(
        default=[
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
        ]
    )
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_endpoint_url: str | None = None

    @field_validator("cors_origins", "allowed_mime_types", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Parse a list from a comma-separated string or list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("api_prefix", "media_url_path")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    @property
    def secure_cookies(self) -> bool:
        """Cookies are marked secure everywhere except local development."""
        return not self.is_development

    @property
    def media_base_url(self) -> str:
        """Public URL prefix for files kept by the local media store."""
        return f"{self.external_url.rstrip('/')}{self.media_url_path}"

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self

    @model_validator(mode="after")
    def validate_s3_settings(self) -> "Settings":
        """Require a bucket when the S3 media provider is selected."""
        if self.media_provider == "s3" and not self.s3_bucket:
            raise ValueError("s3_bucket is required when media_provider is 's3'")
        return self

    @property
    def database_url_sync(self) -> str:
        """Get synchronous database URL for migrations."""
        url = self.database_url
        if url.startswith("sqlite+aiosqlite"):
            return url.replace("sqlite+aiosqlite", "sqlite")
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql")
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once at startup; callers that need configuration
    receive this instance explicitly.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
