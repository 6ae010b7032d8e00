"""File-backed store for layout documents."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from widgetgrid.layouts.errors import LayoutNotFoundError, StorageUnavailableError

logger = logging.getLogger(__name__)

AUTOSAVE_SLOT = "autosave"


class LayoutRepository:
    """JSON file repository: one ``<id>.json`` per named layout plus a reserved autosave slot.

    The store must be opened before use. Writes go through a temp file and an
    atomic rename, so a document on disk is always complete.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._open = False

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot open layout store at {self._root}.") from exc
        self._open = True
        logger.debug("layout_store_opened root=%s", self._root)

    def close(self) -> None:
        self._open = False

    def __enter__(self) -> LayoutRepository:
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def list_ids(self) -> list[str]:
        """Ids of stored named layouts."""
        self._require_open()
        try:
            paths = sorted(self._root.glob("*.json"))
        except OSError as exc:
            raise StorageUnavailableError("Cannot list layout store.") from exc
        return [path.stem for path in paths if path.stem != AUTOSAVE_SLOT]

    def read(self, layout_id: str) -> bytes:
        path = self._path_for(layout_id)
        if not path.exists():
            raise LayoutNotFoundError(layout_id)
        return self._read_path(path)

    def write(self, layout_id: str, data: bytes) -> None:
        self._write_path(self._path_for(layout_id), data)

    def delete(self, layout_id: str) -> bool:
        """Delete a layout document. Missing ids are a no-op."""
        path = self._path_for(layout_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot delete layout '{layout_id}'.") from exc
        return True

    def read_auto(self) -> bytes | None:
        self._require_open()
        path = self._root / f"{AUTOSAVE_SLOT}.json"
        if not path.exists():
            return None
        return self._read_path(path)

    def write_auto(self, data: bytes) -> None:
        self._require_open()
        self._write_path(self._root / f"{AUTOSAVE_SLOT}.json", data)

    def _path_for(self, layout_id: str) -> Path:
        self._require_open()
        cleaned = layout_id.strip()
        if not cleaned or cleaned == AUTOSAVE_SLOT or not _is_safe_id(cleaned):
            raise ValueError(f"Invalid layout id: {layout_id!r}.")
        return self._root / f"{cleaned}.json"

    def _require_open(self) -> None:
        if not self._open:
            raise StorageUnavailableError("Layout store is not open.")

    @staticmethod
    def _read_path(path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {path.name}.") from exc

    @staticmethod
    def _write_path(path: Path, data: bytes) -> None:
        temp = path.with_name(f".{path.name}.tmp")
        try:
            temp.write_bytes(data)
            os.replace(temp, path)
        except OSError as exc:
            temp.unlink(missing_ok=True)
            raise StorageUnavailableError(f"Cannot write {path.name}.") from exc


def _is_safe_id(layout_id: str) -> bool:
    return all(char.isalnum() or char in {"-", "_"} for char in layout_id)
