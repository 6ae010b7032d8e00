from __future__ import annotations

import pytest

from widgetgrid.app.bootstrap import bootstrap_workspace
from widgetgrid.core.models import GridPosition, GridSize, Widget
from widgetgrid.layouts.errors import StorageUnavailableError
from widgetgrid.layouts.repository import LayoutRepository


def test_bootstrap_opens_store_under_app_data(app_data) -> None:
    workspace = bootstrap_workspace(load_env=False, log_to_file=False)
    try:
        assert workspace.repository.is_open
        assert workspace.repository.root == app_data / "layouts"
        assert workspace.settings.logs_dir == app_data / "logs"
        assert len(workspace.manager) == 0
        assert workspace.manager.configuration.columns == 8
    finally:
        workspace.close(autosave=False)
    assert not workspace.repository.is_open


def test_bootstrap_applies_grid_environment(app_data, monkeypatch) -> None:
    monkeypatch.setenv("WIDGETGRID_GRID_PRESET", "compact")
    monkeypatch.setenv("WIDGETGRID_COLUMNS", "5")
    workspace = bootstrap_workspace(load_env=False, log_to_file=False)
    try:
        assert workspace.manager.configuration.columns == 5
        assert workspace.manager.configuration.cell_size == 60.0
    finally:
        workspace.close(autosave=False)


def test_close_autosaves_and_bootstrap_restores(app_data) -> None:
    first = bootstrap_workspace(load_env=False, log_to_file=False)
    first.manager.add_widget(Widget(id="clock", size=GridSize.MEDIUM), GridPosition(1, 2))
    first.close()

    second = bootstrap_workspace(load_env=False, log_to_file=False)
    try:
        restored = second.manager.widget("clock")
        assert restored is not None
        assert restored.position == GridPosition(1, 2)
        assert second.persistence.list_saved_layouts() == []
    finally:
        second.close(autosave=False)


def test_unreadable_autosave_is_ignored(app_data, caplog) -> None:
    layouts = app_data / "layouts"
    layouts.mkdir(parents=True)
    (layouts / "autosave.json").write_bytes(b"{not json")
    workspace = bootstrap_workspace(load_env=False, log_to_file=False)
    try:
        assert len(workspace.manager) == 0
        assert "Ignoring unreadable autosave" in caplog.text
    finally:
        workspace.close(autosave=False)


def test_explicit_layouts_dir_wins(app_data, tmp_path) -> None:
    custom = tmp_path / "elsewhere"
    workspace = bootstrap_workspace(load_env=False, layouts_dir=custom, log_to_file=False)
    try:
        assert workspace.repository.root == custom
        assert custom.is_dir()
        assert not app_data.exists()
    finally:
        workspace.close(autosave=False)


def test_store_is_closed_when_layouts_cannot_be_listed(app_data, monkeypatch) -> None:
    opened: list[LayoutRepository] = []

    def unreadable(self: LayoutRepository) -> list[str]:
        opened.append(self)
        raise StorageUnavailableError("Cannot list layouts.")

    monkeypatch.setattr(LayoutRepository, "list_ids", unreadable)
    with pytest.raises(StorageUnavailableError):
        bootstrap_workspace(load_env=False, log_to_file=False)
    assert len(opened) == 1
    assert not opened[0].is_open
