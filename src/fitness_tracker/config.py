import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _bool(name: str, default: bool) -> bool:
    """
    Helper to parse boolean environment variables.
    Accepts: 1, true, yes, on (case-insensitive).
    """
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


def _norm_db_url(url: str | None) -> str | None:
    """
    Normalize database URL to use async drivers for SQLAlchemy.

    Ensures ``postgres`` URLs use ``asyncpg`` and plain ``sqlite`` URLs use
    ``aiosqlite``. URLs already specifying an async driver are returned as-is.
    """
    if not url:
        return None
    if url.startswith("postgres://"):
        url = "postgresql+asyncpg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://") :]
    if url.startswith("sqlite://"):
        url = "sqlite+aiosqlite://" + url[len("sqlite://") :]
    return url


DEFAULT_GYM_EQUIPMENT = [
    "barbell",
    "bench",
    "cable",
    "dumbbell",
    "machine",
    "pull-up bar",
]


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables.
    Uses pydantic for validation and parsing.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = Field(..., description="Database URL")
    OPENAI_API_KEY: str | None = Field(None, description="OpenAI API key")
    OPENAI_MODEL: str = Field("gpt-4o-mini", description="Vision-capable OpenAI model")
    DEFAULT_TIMEZONE: str = Field("UTC", description="Timezone for users without one")
    GYM_EQUIPMENT: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GYM_EQUIPMENT),
        description="Equipment available to gym users",
    )
    ALERT_WEBHOOK_URL: str | None = Field(None, description="Webhook receiving error logs")
    HOST: str = Field("0.0.0.0", description="HTTP bind host")
    PORT: int = Field(8080, description="HTTP bind port")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # Feature flags
    FF_SEED_CATALOG: bool = Field(
        default_factory=lambda: _bool("FF_SEED_CATALOG", True),
        description="Seed the exercise catalog from bundled data on startup",
    )
    FF_MEAL_VISION: bool = Field(
        default_factory=lambda: _bool("FF_MEAL_VISION", True),
        description="Meal photo analysis feature flag",
    )
    FF_ADMIN_ALERTS: bool = Field(
        default_factory=lambda: _bool("FF_ADMIN_ALERTS", True),
        description="Admin alerts feature flag",
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL environment variable is required")
        return _norm_db_url(v)

    @field_validator("GYM_EQUIPMENT")
    @classmethod
    def normalize_equipment(cls, v: list[str]) -> list[str]:
        return [item.strip().lower() for item in v if item.strip()]


SETTINGS = Config()  # pyright: ignore[reportCallIssue]
