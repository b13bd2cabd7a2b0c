"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting overridable through QUARK_* environment variables
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Decode leniencies live here so deployments can tighten them without code changes
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="QUARK_", case_sensitive=False,
    )

    # Database (resource store)
    database_url: str = "postgresql+asyncpg://quark:quark@db:5432/quark"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """asyncpg needs postgresql+asyncpg://, hosting providers hand out postgresql://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Service endpoint
    service_name: str = "resources"
    service_host: str = "127.0.0.1"
    service_port: int = 8000
    service_path: str = ""

    # Client transport
    client_timeout_seconds: float = 60.0

    # Decode policy
    lenient_delete_ids: bool = True
    require_user: bool = False

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
