"""Structured logging helpers shared by the API, the store and the CLI."""

from __future__ import annotations

import json
import logging
import os
from datetime import UTC, datetime
from typing import Final

CONSOLE_FORMAT: Final[str] = "[%(levelname)s] %(name)s: %(message)s"
DEFAULT_LEVEL: Final[str] = "INFO"
ROOT_LOGGER: Final[str] = "expense_tracker"
JSON_ENV_FLAG: Final[str] = "EXPENSE_TRACKER_JSON_LOGS"
LEVEL_ENV_FLAG: Final[str] = "EXPENSE_TRACKER_LOG_LEVEL"
REQUEST_FIELDS: Final[tuple[str, ...]] = ("method", "path", "status_code", "duration_ms", "expense_id")


class JsonLineFormatter(logging.Formatter):
    """Render log records as single-line JSON payloads."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "source": record.name,
            "message": record.getMessage(),
        }
        for field in REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(level: str | int | None) -> int:
    """Pick the level from the environment, then the argument, then the default."""

    env_level = os.environ.get(LEVEL_ENV_FLAG)
    if env_level:
        candidate = env_level.strip().upper()
    elif isinstance(level, str):
        candidate = level.strip().upper()
    elif isinstance(level, int):
        return int(level)
    else:
        candidate = DEFAULT_LEVEL
    resolved = logging.getLevelName(candidate)
    return int(resolved) if isinstance(resolved, int) else logging.INFO


def _json_logging_enabled(explicit: bool) -> bool:
    if explicit:
        return True
    value = os.environ.get(JSON_ENV_FLAG)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _ensure_console_handler(logger: logging.Logger, level: int, json_format: bool) -> None:
    """Attach exactly one console handler and keep its formatter in sync."""

    formatter: logging.Formatter = JsonLineFormatter() if json_format else logging.Formatter(CONSOLE_FORMAT)
    for handler in logger.handlers:
        if getattr(handler, "_expense_tracker_console", False):
            handler.setLevel(level)
            handler.setFormatter(formatter)
            return
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    stream_handler._expense_tracker_console = True  # type: ignore[attr-defined]
    logger.addHandler(stream_handler)


def setup_logger(
    name: str = ROOT_LOGGER,
    json_format: bool = False,
    level: str | int | None = None,
) -> logging.Logger:
    """Configure and return a logger for the expense tracker modules."""

    resolved_level = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(resolved_level)
    # Keep propagation so capture handlers (pytest ``caplog``) still see records.
    logger.propagate = True
    _ensure_console_handler(logger, resolved_level, _json_logging_enabled(json_format))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; handlers live on the package root logger."""

    return logging.getLogger(name)


__all__ = ["JsonLineFormatter", "get_logger", "setup_logger"]
