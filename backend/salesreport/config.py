"""Configuration helpers for environment variables."""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_DATABASE_URL = "sqlite:///./sales.db"
DEFAULT_REFERENCE_YEAR = 2021
DEFAULT_SEED_SOURCE_URL = "https://s3.amazonaws.com/roxiler.com/product_transaction.json"
DEFAULT_SEED_TIMEOUT = 30.0
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def database_url() -> str:
    return get_env("DATABASE_URL", DEFAULT_DATABASE_URL)


def reference_year() -> int:
    """Year every month window is anchored to (the seed dataset's year)."""
    raw = get_env("REFERENCE_YEAR")
    if raw is None:
        return DEFAULT_REFERENCE_YEAR
    try:
        year = int(raw)
    except ValueError as exc:
        raise ValueError(f"REFERENCE_YEAR must be an integer, got {raw!r}") from exc
    if not 1 <= year <= 9998:
        raise ValueError(f"REFERENCE_YEAR out of range: {year}")
    return year


def seed_source_url() -> str:
    return get_env("SEED_SOURCE_URL", DEFAULT_SEED_SOURCE_URL)


def seed_timeout() -> float:
    raw = get_env("SEED_TIMEOUT_SECONDS")
    if raw is None:
        return DEFAULT_SEED_TIMEOUT
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"SEED_TIMEOUT_SECONDS must be a number, got {raw!r}") from exc


def cors_allow_origins() -> list[str]:
    raw = get_env("CORS_ALLOW_ORIGINS", "") or ""
    parsed = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return parsed or list(DEFAULT_CORS_ORIGINS)


def log_level() -> str:
    return (get_env("LOG_LEVEL", "INFO") or "INFO").upper()


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    reference_year: int = DEFAULT_REFERENCE_YEAR
    seed_source_url: str = DEFAULT_SEED_SOURCE_URL
    seed_timeout: float = DEFAULT_SEED_TIMEOUT
    cors_allow_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Build a Settings snapshot from the current environment."""
    return Settings(
        database_url=database_url(),
        reference_year=reference_year(),
        seed_source_url=seed_source_url(),
        seed_timeout=seed_timeout(),
        cors_allow_origins=cors_allow_origins(),
        log_level=log_level(),
    )
