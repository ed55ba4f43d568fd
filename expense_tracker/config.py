"""Environment-driven settings for the expense tracker service."""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Final

ENV_PREFIX: Final[str] = "EXPENSE_TRACKER_"
STORE_BACKENDS: Final[tuple[str, ...]] = ("memory", "sql")
# Levels understood by both the logging module and uvicorn.
LOG_LEVELS: Final[tuple[str, ...]] = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE")
DEFAULT_DATABASE_URL: Final[str] = "sqlite://"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8000
    store_backend: str = "memory"
    database_url: str = DEFAULT_DATABASE_URL
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"
    json_logs: bool = False


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off", ""}:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_port(name: str, raw: str) -> int:
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{name} must be between 1 and 65535, got {port}")
    return port


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ``).

    Unset variables fall back to the dataclass defaults; malformed values raise
    :class:`ConfigError` instead of being silently replaced.
    """

    env = os.environ if environ is None else environ
    defaults = Settings()

    def lookup(key: str) -> str | None:
        return env.get(ENV_PREFIX + key)

    backend = (lookup("STORE") or defaults.store_backend).strip().lower()
    if backend not in STORE_BACKENDS:
        raise ConfigError(f"{ENV_PREFIX}STORE must be one of {', '.join(STORE_BACKENDS)}, got {backend!r}")

    raw_port = lookup("PORT")
    raw_origins = lookup("CORS_ORIGINS")
    origins = defaults.cors_origins
    if raw_origins is not None:
        origins = tuple(origin.strip() for origin in raw_origins.split(",") if origin.strip())

    log_level = (lookup("LOG_LEVEL") or defaults.log_level).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    raw_json = lookup("JSON_LOGS")

    return Settings(
        host=lookup("HOST") or defaults.host,
        port=_parse_port(ENV_PREFIX + "PORT", raw_port) if raw_port else defaults.port,
        store_backend=backend,
        database_url=lookup("DATABASE_URL") or defaults.database_url,
        cors_origins=origins,
        log_level=log_level,
        json_logs=_parse_bool(ENV_PREFIX + "JSON_LOGS", raw_json) if raw_json is not None else defaults.json_logs,
    )


__all__ = ["ConfigError", "LOG_LEVELS", "Settings", "load_settings", "STORE_BACKENDS"]
