"""Command line access to stored layouts."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from widgetgrid.app.bootstrap import Workspace, bootstrap_workspace
from widgetgrid.core.manager import GridManager
from widgetgrid.layouts.errors import LayoutPersistenceError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="widgetgrid", description="Manage saved widget grid layouts.")
    parser.add_argument(
        "--layouts-dir",
        type=Path,
        default=None,
        help="Layout store directory (defaults to the app-data layouts dir).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("list", help="List saved layouts, newest first.")

    show = commands.add_parser("show", help="Print the widgets of a layout.")
    show.add_argument("layout", help="Layout id or name.")

    export = commands.add_parser("export", help="Write a layout document.")
    export.add_argument("layout", help="Layout id or name.")
    export.add_argument("-o", "--output", type=Path, default=None, help="Output file (stdout if omitted).")

    imported = commands.add_parser("import", help="Import a layout document as a new layout.")
    imported.add_argument("path", type=Path)

    delete = commands.add_parser("delete", help="Delete a saved layout.")
    delete.add_argument("layout", help="Layout id or name.")

    rename = commands.add_parser("rename", help="Rename a saved layout.")
    rename.add_argument("layout", help="Layout id or name.")
    rename.add_argument("name")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        workspace = bootstrap_workspace(
            layouts_dir=args.layouts_dir, restore_autosave=False, log_to_file=False
        )
    except LayoutPersistenceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    try:
        return _run(args, workspace)
    except (LayoutPersistenceError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        workspace.close(autosave=False)


def _run(args: argparse.Namespace, workspace: Workspace) -> int:
    persistence = workspace.persistence
    if args.command == "list":
        for layout in persistence.list_saved_layouts():
            stamp = layout.last_modified.isoformat(timespec="seconds")
            print(f"{layout.id}  {stamp}  {len(layout.widgets):3d}  {layout.name}")
        return 0
    if args.command == "show":
        layout = persistence.find_layout(args.layout)
        manager = GridManager(layout.configuration)
        persistence.load_layout(layout, manager)
        print(manager.describe())
        return 0
    if args.command == "export":
        data = persistence.export_layout(persistence.find_layout(args.layout).id)
        if args.output is None:
            sys.stdout.write(data.decode("utf-8") + "\n")
        else:
            args.output.write_bytes(data)
        return 0
    if args.command == "import":
        print(persistence.import_layout(args.path.read_bytes()))
        return 0
    if args.command == "delete":
        persistence.delete_layout(persistence.find_layout(args.layout).id)
        return 0
    if args.command == "rename":
        persistence.rename_layout(persistence.find_layout(args.layout).id, args.name)
        return 0
    return 2
