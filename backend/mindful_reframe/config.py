"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - reframe_max_turns counts user + assistant entries (6 user turns at 12)

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Behaviour copy (crisis text, menu labels) is NOT here: see core/reframe_rules.py
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://reframe:reframe@db:5432/reframe"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 30
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 20_000

    # Models
    reframe_model: str = "claude-sonnet-4-5"
    analysis_model: str = "claude-sonnet-4-5"
    reframe_max_tokens: int = 600
    analysis_max_tokens: int = 1500

    # Reframing dialogue
    reframe_max_turns: int = 12
    reframe_pacing_interval_turns: int = 3
    # ADR: upper bound on one model round-trip inside a chat turn; on expiry the
    # turn degrades to the fallback message instead of waiting indefinitely
    model_timeout_seconds: float = 10.0
    max_input_length: int = 5000
    max_saved_entries_per_user: int = 20

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
