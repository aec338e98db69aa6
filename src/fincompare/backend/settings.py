"""Runtime settings read from ``FINCOMPARE_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 5 * 60
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0


def _parse_positive_int(value: str | None, *, env: str) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except ValueError:
        _LOGGER.warning("Ignoring invalid value for %s: %s", env, value)
        return None
    if parsed <= 0:
        _LOGGER.warning("Ignoring non-positive value for %s: %s", env, value)
        return None
    return parsed


def _parse_positive_float(value: str | None, *, env: str) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = float(value)
    except ValueError:
        _LOGGER.warning("Ignoring invalid value for %s: %s", env, value)
        return None
    if parsed <= 0:
        _LOGGER.warning("Ignoring non-positive value for %s: %s", env, value)
        return None
    return parsed


def _parse_allowed_origins(raw: str | None) -> frozenset[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return frozenset()

    return frozenset(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Values the application factory needs to build its collaborators."""

    supabase_url: str | None = None
    supabase_key: str = ""
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    allowed_origins: frozenset[str] = frozenset()


def load_settings() -> Settings:
    """Read settings from the process environment, ignoring invalid values."""

    cache_ttl = _parse_positive_int(
        os.getenv("FINCOMPARE_CACHE_TTL"), env="FINCOMPARE_CACHE_TTL"
    )
    fetch_timeout = _parse_positive_float(
        os.getenv("FINCOMPARE_FETCH_TIMEOUT"), env="FINCOMPARE_FETCH_TIMEOUT"
    )
    supabase_url = (os.getenv("FINCOMPARE_SUPABASE_URL") or "").strip() or None

    return Settings(
        supabase_url=supabase_url,
        supabase_key=(os.getenv("FINCOMPARE_SUPABASE_KEY") or "").strip(),
        cache_ttl_seconds=cache_ttl or DEFAULT_CACHE_TTL_SECONDS,
        fetch_timeout_seconds=fetch_timeout or DEFAULT_FETCH_TIMEOUT_SECONDS,
        allowed_origins=_parse_allowed_origins(os.getenv("FINCOMPARE_ALLOWED_ORIGINS")),
    )


__all__ = [
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_FETCH_TIMEOUT_SECONDS",
    "Settings",
    "load_settings",
]
