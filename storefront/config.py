"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - DB_DSN accepted as a fallback name for DATABASE_URL
"""

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.core.domain_types import LockStrategy


def to_asyncpg_url(url: str) -> str:
    """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = Field(
        "postgresql+asyncpg://storefront:storefront@db:5432/storefront",
        validation_alias=AliasChoices("database_url", "db_dsn"),
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        if isinstance(v, str):
            return to_asyncpg_url(v)
        return v

    database_pool_size: int = 10
    database_max_overflow: int = 5
    database_pool_recycle_seconds: int = 1800

    # Order placement
    order_timeout_seconds: float = Field(10.0, gt=0)
    order_max_attempts: int = Field(3, ge=1)
    order_retry_base_delay_ms: int = Field(50, ge=0)
    lock_strategy: LockStrategy = LockStrategy.SORTED

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Interactive client
    server_url: str = "http://localhost:8080"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
