from __future__ import annotations

import orjson
import pytest

from widgetgrid.cli import build_parser, main
from widgetgrid.core.manager import GridManager
from widgetgrid.core.models import GridSize, Widget
from widgetgrid.layouts.repository import LayoutRepository
from widgetgrid.layouts.service import LayoutPersistence


@pytest.fixture
def store(app_data, tmp_path):
    root = tmp_path / "cli-layouts"
    manager = GridManager()
    manager.add_widget(Widget(id="calendar", size=GridSize.LARGE, title="Calendar"))
    manager.add_widget(Widget(id="todo", size=GridSize.SMALL, title="Todo"))
    with LayoutRepository(root) as repository:
        LayoutPersistence(repository).save_layout(manager, "Work")
    return root


def _run(store, *args: str) -> int:
    return main(["--layouts-dir", str(store), *args])


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_list_and_show(store, capsys) -> None:
    assert _run(store, "list") == 0
    assert "Work" in capsys.readouterr().out

    assert _run(store, "show", "Work") == 0
    out = capsys.readouterr().out
    assert "Widgets: 2" in out
    assert "- Calendar at (0,0) (large)" in out
    assert "- Todo at (0,4) (small)" in out


def test_export_import_rename_delete(store, tmp_path, capsys) -> None:
    exported = tmp_path / "work.json"
    assert _run(store, "export", "Work", "-o", str(exported)) == 0
    assert orjson.loads(exported.read_bytes())["name"] == "Work"

    assert _run(store, "import", str(exported)) == 0
    new_id = capsys.readouterr().out.strip()
    assert new_id

    assert _run(store, "rename", new_id, "Copy") == 0
    assert _run(store, "delete", "Work") == 0
    capsys.readouterr()
    assert _run(store, "list") == 0
    listing = capsys.readouterr().out.strip().splitlines()
    assert len(listing) == 1
    assert listing[0].startswith(new_id)
    assert listing[0].endswith("Copy")


def test_export_to_stdout(store, capsys) -> None:
    assert _run(store, "export", "Work") == 0
    document = orjson.loads(capsys.readouterr().out)
    assert [widget["id"] for widget in document["widgets"]] == ["calendar", "todo"]


def test_errors_are_reported_with_exit_code(store, tmp_path, capsys) -> None:
    assert _run(store, "show", "Nope") == 1
    assert "error: Layout 'Nope' not found." in capsys.readouterr().err

    bad = tmp_path / "bad.json"
    bad.write_bytes(b"{\"schemaVersion\": 99}")
    assert _run(store, "import", str(bad)) == 1
    assert "Unsupported layout schema version: 99" in capsys.readouterr().err

    assert _run(store, "rename", "Work", "   ") == 1
    assert "cannot be empty" in capsys.readouterr().err
