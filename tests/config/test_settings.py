from __future__ import annotations

from pathlib import Path

import pytest

from panelmap.config import DEFAULT_BUSY_TIMEOUT_MS, DEFAULT_DB_PATH, Settings


def test_settings_defaults_when_environment_is_empty() -> None:
    settings = Settings.from_env({})

    assert settings.db_path == Path(DEFAULT_DB_PATH)
    assert settings.busy_timeout_ms == DEFAULT_BUSY_TIMEOUT_MS
    assert settings.log_level == "INFO"


def test_settings_load_from_env() -> None:
    settings = Settings.from_env(
        {
            "PANELMAP_DB_PATH": " data/field.db ",
            "PANELMAP_BUSY_TIMEOUT_MS": "250",
            "PANELMAP_LOG_LEVEL": "debug",
        }
    )

    assert settings.db_path == Path("data/field.db")
    assert settings.busy_timeout_ms == 250
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("environ", "variable"),
    [
        ({"PANELMAP_DB_PATH": "  "}, "PANELMAP_DB_PATH"),
        ({"PANELMAP_BUSY_TIMEOUT_MS": "soon"}, "PANELMAP_BUSY_TIMEOUT_MS"),
        ({"PANELMAP_BUSY_TIMEOUT_MS": "0"}, "PANELMAP_BUSY_TIMEOUT_MS"),
        ({"PANELMAP_BUSY_TIMEOUT_MS": ""}, "PANELMAP_BUSY_TIMEOUT_MS"),
        ({"PANELMAP_LOG_LEVEL": "LOUD"}, "PANELMAP_LOG_LEVEL"),
    ],
)
def test_invalid_settings_fail_fast(environ: dict[str, str], variable: str) -> None:
    with pytest.raises(ValueError, match=variable):
        Settings.from_env(environ)
