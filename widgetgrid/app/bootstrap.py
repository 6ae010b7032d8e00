"""Runtime wiring for a grid workspace."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from widgetgrid.core.manager import GridManager
from widgetgrid.infra.config import DEFAULT_ENV_FILE, WorkspaceSettings, read_settings
from widgetgrid.infra.logging import setup_logging
from widgetgrid.layouts.errors import LayoutDecodeError
from widgetgrid.layouts.repository import LayoutRepository
from widgetgrid.layouts.service import LayoutPersistence

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Workspace:
    """Live grid plus the layout store backing it."""

    manager: GridManager
    persistence: LayoutPersistence
    repository: LayoutRepository
    settings: WorkspaceSettings

    def close(self, *, autosave: bool = True) -> None:
        """Optionally autosave, then close the layout store."""
        if autosave and self.repository.is_open:
            self.persistence.auto_save_layout(self.manager)
        self.repository.close()


def bootstrap_workspace(
    *,
    load_env: bool = True,
    layouts_dir: Path | None = None,
    restore_autosave: bool = True,
    log_to_file: bool = True,
) -> Workspace:
    """Read settings, set up logging, open the layout store and build a grid.

    ``layouts_dir`` overrides the configured store location. Only the store
    directory is created, plus the logs directory when logging to a file.
    """
    settings = read_settings(env_file=DEFAULT_ENV_FILE if load_env else None)
    setup_logging(settings, to_file=log_to_file)
    store_dir = layouts_dir or settings.layouts_dir
    logger.info("workspace_paths layouts=%s logs=%s", store_dir, settings.logs_dir)

    repository = LayoutRepository(store_dir)
    repository.open()
    try:
        persistence = LayoutPersistence(repository)
        manager = GridManager(settings.grid)
        if restore_autosave:
            _restore_autosave(persistence, manager)
    except Exception:
        repository.close()
        raise
    return Workspace(manager=manager, persistence=persistence, repository=repository, settings=settings)


def _restore_autosave(persistence: LayoutPersistence, manager: GridManager) -> None:
    try:
        restored = persistence.restore_auto_layout(manager)
    except LayoutDecodeError as exc:
        logger.warning("Ignoring unreadable autosave: %s", exc)
        return
    if restored:
        logger.info("autosave_restored widgets=%d", len(manager))
