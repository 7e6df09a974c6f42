"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Mowsy API"
    debug: bool = False
    log_level: str = "INFO"
    api_v1_prefix: str = "/api/v1"
    allowed_origins: str = "http://localhost:3000"

    # Database
    database_url: str
    auto_create_tables: bool = False

    # JWT
    jwt_secret: str = Field(..., min_length=16)
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "mowsy-api"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # Admin
    admin_api_key: Optional[str] = None

    # Stripe
    stripe_secret_key: Optional[str] = None

    # Geocodio
    geocodio_api_key: Optional[str] = None
    geocodio_base_url: str = "https://api.geocod.io/v1.7"
    geocodio_timeout_seconds: float = 30.0

    # S3 Config
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    aws_s3_bucket_name: Optional[str] = None

    # Uploads
    presign_ttl_seconds: int = 3600
    max_upload_size_mb: int = 10

    # Rate limiting
    rate_limit: str = "100/minute"

    # Listings
    listing_filter_default: bool = False

    @field_validator("database_url")
    @classmethod
    def use_async_driver(cls, value: str) -> str:
        """Normalize plain PostgreSQL URLs onto the asyncpg driver."""
        if value.startswith("postgres://"):
            value = "postgresql://" + value[len("postgres://"):]
        if value.startswith("postgresql://"):
            value = "postgresql+asyncpg://" + value[len("postgresql://"):]
        return value

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


def sync_database_url(url: str) -> str:
    """Same database on the psycopg2 driver, for Alembic."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url.replace("+asyncpg", "")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
