"""Runtime configuration for the inventory store and CLI entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Mapping


DEFAULT_DB_PATH = ".panelmap.db"
DEFAULT_BUSY_TIMEOUT_MS = 5000
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    """Validated settings shared by every panelmap entrypoint."""

    db_path: Path
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        db_path_raw = source.get("PANELMAP_DB_PATH", DEFAULT_DB_PATH).strip()
        if not db_path_raw:
            raise ValueError("PANELMAP_DB_PATH cannot be empty")

        timeout_raw = source.get("PANELMAP_BUSY_TIMEOUT_MS", str(DEFAULT_BUSY_TIMEOUT_MS)).strip()
        if not timeout_raw:
            raise ValueError("PANELMAP_BUSY_TIMEOUT_MS cannot be empty")
        busy_timeout_ms = _parse_positive_int(name="PANELMAP_BUSY_TIMEOUT_MS", raw_value=timeout_raw)

        log_level = source.get("PANELMAP_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in _LOG_LEVELS:
            allowed = ", ".join(sorted(_LOG_LEVELS))
            raise ValueError(f"PANELMAP_LOG_LEVEL must be one of: {allowed}")

        return cls(db_path=Path(db_path_raw), busy_timeout_ms=busy_timeout_ms, log_level=log_level)


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    """Route log records to stderr so stdout stays reserved for JSON payloads."""

    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level, logging.INFO))
