"""Workspace settings from the process environment and an optional ``.env`` file.

Settings are resolved once into an immutable ``WorkspaceSettings``. Reading
them never writes back to ``os.environ`` and never touches the filesystem
beyond the env file itself; directories are created by whoever uses them.

Recognised keys::

    WIDGETGRID_APP_DATA_DIR   root for layouts/ and logs/ (default ~/.widgetgrid)
    WIDGETGRID_LAYOUTS_DIR    layout store, relative paths sit under the root
    WIDGETGRID_LOG_DIR        run logs, relative paths sit under the root
    WIDGETGRID_LOG_LEVEL      DEBUG/INFO/WARNING/ERROR
    WIDGETGRID_LOG_FORMAT     console format, text or json
    WIDGETGRID_GRID_PRESET    standard/compact/large
    WIDGETGRID_COLUMNS, WIDGETGRID_CELL_SIZE, WIDGETGRID_CELL_SPACING
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from widgetgrid.core.models import CONFIGURATION_PRESETS, GridBounds, GridConfiguration

logger = logging.getLogger(__name__)

ENV_PREFIX = "WIDGETGRID_"
DEFAULT_ENV_FILE = Path(".env")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class WorkspaceSettings:
    """Resolved settings for one workspace run."""

    app_data_dir: Path
    layouts_dir: Path
    logs_dir: Path
    grid: GridConfiguration
    log_level: str = "INFO"
    log_format: str = "text"


def read_env_file(path: Path) -> dict[str, str]:
    """Parse ``KEY=VALUE`` lines. A missing file reads as empty.

    Blank lines and ``#`` comments are skipped, a leading ``export`` is
    accepted, and one layer of matching quotes is stripped from values.
    """
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for number, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.removeprefix("export ").strip()
        if not sep or not key:
            logger.debug("env_line_skipped path=%s line=%d", path, number)
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        values[key] = value
    return values


def read_settings(
    environ: Mapping[str, str] | None = None,
    *,
    env_file: Path | None = DEFAULT_ENV_FILE,
) -> WorkspaceSettings:
    """Resolve workspace settings. Process environment wins over the env file."""
    values = read_env_file(env_file) if env_file is not None else {}
    values.update(os.environ if environ is None else environ)

    root = _app_data_dir(_setting(values, "APP_DATA_DIR"))
    return WorkspaceSettings(
        app_data_dir=root,
        layouts_dir=_below(root, _setting(values, "LAYOUTS_DIR"), "layouts"),
        logs_dir=_below(root, _setting(values, "LOG_DIR"), "logs"),
        grid=grid_configuration(values),
        log_level=_log_level(_setting(values, "LOG_LEVEL")),
        log_format=_log_format(_setting(values, "LOG_FORMAT")),
    )


def grid_configuration(values: Mapping[str, str]) -> GridConfiguration:
    """Pick a preset and apply numeric overrides.

    Malformed numbers keep the preset's value; an override set that the grid
    rejects falls back to the preset as a whole.
    """
    preset_name = _setting(values, "GRID_PRESET").lower() or "standard"
    preset = CONFIGURATION_PRESETS.get(preset_name)
    if preset is None:
        logger.warning("Unknown grid preset '%s'; using standard.", preset_name)
        preset = GridConfiguration.STANDARD
    columns = _number(values, "COLUMNS", int, preset.columns)
    cell_size = _number(values, "CELL_SIZE", float, preset.cell_size)
    spacing = _number(values, "CELL_SPACING", float, preset.cell_spacing)
    try:
        return GridConfiguration(cell_size=cell_size, cell_spacing=spacing, bounds=GridBounds(columns))
    except ValueError as exc:
        logger.warning("Invalid grid configuration from environment: %s", exc)
        return preset


def _setting(values: Mapping[str, str], name: str) -> str:
    return values.get(f"{ENV_PREFIX}{name}", "").strip()


def _number(values: Mapping[str, str], name: str, kind: Callable[[str], float], default: float) -> float:
    raw = _setting(values, name)
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s%s=%r.", ENV_PREFIX, name, raw)
        return default


def _app_data_dir(raw: str) -> Path:
    if not raw:
        return Path.home() / ".widgetgrid"
    path = Path(raw).expanduser()
    return path if path.is_absolute() else Path.cwd() / path


def _below(root: Path, raw: str, default_name: str) -> Path:
    if not raw:
        return root / default_name
    path = Path(raw).expanduser()
    return path if path.is_absolute() else root / path


def _log_level(raw: str) -> str:
    level = raw.upper() or "INFO"
    if level not in logging.getLevelNamesMapping():
        logger.warning("Unknown log level '%s'; using INFO.", raw)
        return "INFO"
    return level


def _log_format(raw: str) -> str:
    kind = raw.lower() or "text"
    if kind not in LOG_FORMATS:
        logger.warning("Unknown log format '%s'; using text.", raw)
        return "text"
    return kind
