"""Application settings loaded from environment variables.

Every field is read from ``FINTRAX_<FIELD>`` (e.g. ``FINTRAX_DATABASE_URL``).
OS environment variables win over the env file, which wins over defaults.
The env file is the first existing one of:

- ``$FINTRAX_ENV_FILE`` (relative paths resolve against the project root)
- ``config/.env.dev`` for local development
- ``config/.env``
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_GRANULARITIES = ("DAILY", "WEEKLY", "MONTHLY", "YEARLY")


def _project_root() -> Path:
    """Nearest ancestor holding ``config/`` or ``.git``; cwd otherwise."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "config").is_dir() or (candidate / ".git").is_dir():
            return candidate
    return Path.cwd()


def get_config_dir() -> Path:
    return _project_root() / "config"


def _env_file() -> Optional[Path]:
    candidates = []
    explicit = os.environ.get("FINTRAX_ENV_FILE")
    if explicit:
        path = Path(explicit)
        candidates.append(path if path.is_absolute() else _project_root() / path)
    config_dir = get_config_dir()
    candidates += [config_dir / ".env.dev", config_dir / ".env"]
    return next((path for path in candidates if path.exists()), None)


class Settings(BaseSettings):
    """Engine, database and CLI configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRAX_",
        env_file=_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Fintrax"
    debug: bool = False

    # Database (sqlite+aiosqlite by default, postgresql+asyncpg also works)
    database_url: str = "sqlite+aiosqlite:///./fintrax.db"

    # Money
    money_scale: int = Field(default=2, ge=0, le=6)
    currency_code: str = "EUR"  # display only, no conversion

    # Recomputation
    query_timeout_seconds: float = Field(default=5.0, gt=0)
    recompute_max_attempts: int = Field(default=3, ge=1)
    recompute_backoff_seconds: float = Field(default=0.05, ge=0)
    recompute_backoff_max_seconds: float = Field(default=2.0, ge=0)
    tracked_granularities: str = ",".join(_GRANULARITIES)

    # Trends
    default_trend_months: int = Field(default=6, ge=1)

    # Logging
    log_level: str = "INFO"

    @field_validator("tracked_granularities", mode="before")
    @classmethod
    def _validate_granularities(cls, v: Any) -> str:
        """Store as comma-separated upper-case names; reject unknown ones."""
        items = v if isinstance(v, (list, tuple)) else str(v or "").split(",")
        names = [str(item).strip().upper() for item in items if str(item).strip()]
        unknown = [name for name in names if name not in _GRANULARITIES]
        if unknown:
            msg = f"Unknown granularities: {', '.join(unknown)}"
            raise ValueError(msg)
        return ",".join(names)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def granularities(self) -> list[str]:
        """Parse tracked granularities from the comma-separated string."""
        return [g for g in self.tracked_granularities.split(",") if g]

    @property
    def database_type(self) -> str:
        """Database backend name, e.g. 'sqlite' or 'postgresql'."""
        return self.database_url.split(":", 1)[0].split("+", 1)[0]


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
