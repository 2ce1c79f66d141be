"""Environment-driven settings for the records service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

DEFAULT_DATA_FILE = "data.json"
DEFAULT_PORT = 4789


@dataclass(frozen=True)
class Settings:
    """Typed view of the JSON_RECORDS_* environment variables."""

    data_file: str = DEFAULT_DATA_FILE
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    await_persistence: bool = False
    persistence_timeout: float = 5.0
    log_level: str = "INFO"


def _int(value: Optional[str], default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _float(value: Optional[str], default: float) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


def _bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    return Settings(
        data_file=os.getenv("JSON_RECORDS_DATA_FILE") or DEFAULT_DATA_FILE,
        host=os.getenv("JSON_RECORDS_HOST", "0.0.0.0"),
        port=_int(os.getenv("JSON_RECORDS_PORT"), DEFAULT_PORT),
        await_persistence=_bool(os.getenv("JSON_RECORDS_AWAIT_PERSISTENCE")),
        persistence_timeout=_float(os.getenv("JSON_RECORDS_PERSISTENCE_TIMEOUT"), 5.0),
        log_level=(os.getenv("JSON_RECORDS_LOG_LEVEL") or "INFO").upper(),
    )
