"""Shared plumbing for panelmap CLI entrypoints."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Callable

from dotenv import load_dotenv

from panelmap.config import Settings, configure_logging
from panelmap.errors import InventoryError
from panelmap.service import InventoryService


EXIT_OK = 0
EXIT_DOMAIN_ERROR = 1
EXIT_CONFIG_ERROR = 2


def add_db_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db-path",
        default=None,
        help="SQLite database path (defaults to PANELMAP_DB_PATH or .panelmap.db)",
    )


def load_settings() -> Settings:
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return settings


def open_service(db_path: str | None) -> InventoryService:
    settings = load_settings()
    target = Path(db_path) if db_path else settings.db_path
    return InventoryService.from_db_path(target, busy_timeout_ms=settings.busy_timeout_ms)


def emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=True, indent=2))


def emit_error(exc: InventoryError) -> int:
    emit({"ok": False, "error": exc.to_dict()})
    return EXIT_DOMAIN_ERROR


def emit_config_error(exc: ValueError) -> int:
    emit({"ok": False, "error": {"kind": "configuration_error", "message": str(exc)}})
    return EXIT_CONFIG_ERROR


def read_json_file(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def run_command(db_path: str | None, handler: Callable[[InventoryService], dict[str, Any]]) -> int:
    """Open the store, run one command and print its JSON payload."""

    try:
        service = open_service(db_path)
    except ValueError as exc:
        return emit_config_error(exc)
    except InventoryError as exc:
        return emit_error(exc)

    with service:
        try:
            payload = handler(service)
        except InventoryError as exc:
            return emit_error(exc)

    emit(payload)
    return EXIT_OK
