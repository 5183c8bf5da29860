from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, time
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from booking_core.scheduling.types import BusinessHours

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./booking.db"


def _parse_clock(value: str, name: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except ValueError:
        raise ValueError(f"{name} must be HH:MM (24h), got {value!r}")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def async_database_url(url: str) -> str:
    """Point plain Postgres URLs at the asyncpg driver."""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = url.replace("postgresql", "postgresql+asyncpg", 1)
    return url


@dataclass(frozen=True)
class Settings:
    database_url: str
    sql_echo: bool
    slot_store: str
    business_hours: BusinessHours
    default_owner_id: Optional[str]
    log_level: str
    api_host: str
    api_port: int

    def hours_for(self, owner_id: str) -> BusinessHours:
        # Every business currently shares the process-wide hours.
        return self.business_hours


def load_settings() -> Settings:
    business_hours = BusinessHours(
        opening_time=_parse_clock(os.getenv("OPENING_TIME", "09:00"), "OPENING_TIME"),
        closing_time=_parse_clock(os.getenv("CLOSING_TIME", "18:00"), "CLOSING_TIME"),
        slot_granularity_minutes=int(os.getenv("SLOT_INTERVAL_MINUTES", "15")),
        timezone=os.getenv("BUSINESS_TIMEZONE", "UTC"),
    )
    return Settings(
        database_url=async_database_url(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)),
        sql_echo=_env_flag("SQL_ECHO"),
        slot_store=os.getenv("SLOT_STORE", "sql").strip().lower(),
        business_hours=business_hours,
        default_owner_id=(os.getenv("DEFAULT_OWNER_ID") or "").strip() or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", 8000)),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
