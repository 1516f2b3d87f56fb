from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    log_level: str
    sentry_dsn: str | None
    rate_limit: str
    analyze_rate_limit: str
    rate_limit_enabled: bool
    min_posting_chars: int
    max_workers: int
    lexicon_path: str | None
    scoring_config_path: str | None


settings = Settings(
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    analyze_rate_limit=_get_env("ANALYZE_RATE_LIMIT", "10/minute") or "10/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    min_posting_chars=_get_env_int("MIN_POSTING_CHARS", 100),
    max_workers=_get_env_int("TAILOR_MAX_WORKERS", 1),
    lexicon_path=_get_env("LEXICON_PATH"),
    scoring_config_path=_get_env("SCORING_CONFIG_PATH"),
)

if settings.min_posting_chars < 0:
    raise RuntimeError("MIN_POSTING_CHARS must not be negative.")

if settings.max_workers < 1:
    raise RuntimeError("TAILOR_MAX_WORKERS must be at least 1.")

__all__ = ["Settings", "settings"]
