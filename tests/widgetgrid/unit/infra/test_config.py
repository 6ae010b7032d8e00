from __future__ import annotations

import os
from pathlib import Path

from widgetgrid.core.models import GridConfiguration
from widgetgrid.infra.config import grid_configuration, read_env_file, read_settings


def test_read_env_file_parses_keys_quotes_and_comments(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# workspace\nWIDGETGRID_COLUMNS=10\nexport WIDGETGRID_LOG_LEVEL='debug'\nNO_EQUALS\n=orphan\n\n",
        encoding="utf-8",
    )
    assert read_env_file(env_file) == {"WIDGETGRID_COLUMNS": "10", "WIDGETGRID_LOG_LEVEL": "debug"}


def test_read_env_file_missing_is_empty(tmp_path) -> None:
    assert read_env_file(tmp_path / ".env.missing") == {}


def test_settings_default_under_home(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    settings = read_settings({}, env_file=None)
    assert settings.app_data_dir == Path.home() / ".widgetgrid"
    assert settings.layouts_dir == settings.app_data_dir / "layouts"
    assert settings.logs_dir == settings.app_data_dir / "logs"
    assert settings.grid == GridConfiguration.STANDARD
    assert (settings.log_level, settings.log_format) == ("INFO", "text")
    assert not settings.app_data_dir.exists()


def test_relative_dirs_resolve_under_app_data_root(tmp_path) -> None:
    root = tmp_path / "data"
    settings = read_settings(
        {
            "WIDGETGRID_APP_DATA_DIR": str(root),
            "WIDGETGRID_LAYOUTS_DIR": "saved",
            "WIDGETGRID_LOG_DIR": str(tmp_path / "elsewhere"),
        },
        env_file=None,
    )
    assert settings.layouts_dir == root / "saved"
    assert settings.logs_dir == tmp_path / "elsewhere"
    assert not root.exists()


def test_process_environment_wins_over_env_file(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("WIDGETGRID_COLUMNS=10\nWIDGETGRID_LOG_FORMAT=json\n", encoding="utf-8")
    settings = read_settings({"WIDGETGRID_COLUMNS": "6"}, env_file=env_file)
    assert settings.grid.columns == 6
    assert settings.log_format == "json"


def test_reading_settings_leaves_environment_alone(app_data, tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("WIDGETGRID_GRID_PRESET=compact\n", encoding="utf-8")
    before = dict(os.environ)
    settings = read_settings(env_file=env_file)
    assert settings.app_data_dir == app_data
    assert settings.grid == GridConfiguration.COMPACT
    assert dict(os.environ) == before


def test_grid_preset_with_overrides() -> None:
    config = grid_configuration(
        {
            "WIDGETGRID_GRID_PRESET": "Large",
            "WIDGETGRID_COLUMNS": "10",
            "WIDGETGRID_CELL_SPACING": "2.5",
        }
    )
    assert config.columns == 10
    assert config.cell_size == 100.0
    assert config.cell_spacing == 2.5


def test_grid_configuration_falls_back_on_bad_values(caplog) -> None:
    config = grid_configuration({"WIDGETGRID_GRID_PRESET": "enormous", "WIDGETGRID_CELL_SIZE": "wide"})
    assert config == GridConfiguration.STANDARD
    assert "Unknown grid preset 'enormous'" in caplog.text
    assert "Ignoring malformed WIDGETGRID_CELL_SIZE='wide'" in caplog.text

    config = grid_configuration({"WIDGETGRID_GRID_PRESET": "compact", "WIDGETGRID_COLUMNS": "0"})
    assert config == GridConfiguration.COMPACT


def test_unknown_log_settings_fall_back(caplog) -> None:
    settings = read_settings(
        {"WIDGETGRID_LOG_LEVEL": "chatty", "WIDGETGRID_LOG_FORMAT": "xml"},
        env_file=None,
    )
    assert settings.log_level == "INFO"
    assert settings.log_format == "text"
    assert "Unknown log level 'chatty'" in caplog.text
