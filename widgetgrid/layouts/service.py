"""Named layout use cases: save, load, list, export and import."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from widgetgrid.core.manager import GridManager
from widgetgrid.core.models import WidgetContent, new_widget_id
from widgetgrid.layouts.errors import LayoutDecodeError, LayoutNotFoundError
from widgetgrid.layouts.repository import AUTOSAVE_SLOT, LayoutRepository
from widgetgrid.layouts.schema import (
    GridLayoutData,
    WidgetRecord,
    capture_layout,
    decode_layout,
    encode_layout,
)

logger = logging.getLogger(__name__)

AUTOSAVE_NAME = "Autosave"

ContentFactory = Callable[[WidgetRecord], WidgetContent | None]


class LayoutPersistence:
    """High-level layout operations over a layout repository.

    Snapshots are captured synchronously from the manager before any I/O, and
    loading applies a stored snapshot in one atomic replace. A failed call
    leaves both the manager and the stored layouts as they were.
    """

    def __init__(
        self,
        repository: LayoutRepository,
        *,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or (lambda: datetime.now(UTC))
        self._new_id = id_factory or new_widget_id
        self._layouts: dict[str, GridLayoutData] = {}
        self._current_layout_id: str | None = None
        self.reload()

    @property
    def current_layout_id(self) -> str | None:
        """Id of the layout most recently saved or loaded."""
        return self._current_layout_id

    def reload(self) -> None:
        """Re-read every stored layout, skipping unreadable documents."""
        layouts: dict[str, GridLayoutData] = {}
        for layout_id in self._repository.list_ids():
            try:
                layout = decode_layout(self._repository.read(layout_id))
            except LayoutDecodeError as exc:
                logger.warning("Skipping invalid layout '%s': %s", layout_id, exc)
                continue
            if layout.id != layout_id:
                layout = replace(layout, id=layout_id)
            layouts[layout_id] = layout
        self._layouts = layouts
        logger.debug("layouts_loaded count=%d", len(layouts))

    def list_saved_layouts(self) -> list[GridLayoutData]:
        """Named layouts, most recently modified first."""
        return sorted(self._layouts.values(), key=lambda layout: layout.last_modified, reverse=True)

    def layouts_by_name(self) -> list[GridLayoutData]:
        return sorted(self._layouts.values(), key=lambda layout: layout.name.lower())

    @property
    def most_recent_layout(self) -> GridLayoutData | None:
        layouts = self.list_saved_layouts()
        return layouts[0] if layouts else None

    def get_layout(self, layout_id: str) -> GridLayoutData | None:
        return self._layouts.get(layout_id)

    def find_layout(self, key: str) -> GridLayoutData:
        """Resolve a layout by id, then by name (newest match wins)."""
        layout = self._layouts.get(key)
        if layout is not None:
            return layout
        cleaned = key.strip()
        for candidate in self.list_saved_layouts():
            if candidate.name == cleaned:
                return candidate
        raise LayoutNotFoundError(key)

    def snapshot(self, manager: GridManager, name: str) -> GridLayoutData:
        """Capture a manager under a fresh id without storing it."""
        return capture_layout(
            manager, _validate_name(name), layout_id=self._new_id(), now=self._clock()
        )

    def store(self, layout: GridLayoutData) -> str:
        """Persist a captured snapshot and return its id."""
        self._repository.write(layout.id, encode_layout(layout))
        self._layouts[layout.id] = layout
        return layout.id

    def save_layout(self, manager: GridManager, name: str) -> str:
        """Save the manager's state as a new named layout."""
        layout_id = self.store(self.snapshot(manager, name))
        self._current_layout_id = layout_id
        logger.info("layout_saved id=%s name=%s widgets=%d", layout_id, name.strip(), len(manager))
        return layout_id

    def load_layout(
        self,
        layout: GridLayoutData | str,
        manager: GridManager,
        content_factory: ContentFactory | None = None,
    ) -> GridLayoutData:
        """Replace the manager's configuration and widgets with a stored layout.

        ``layout`` may be a snapshot, a layout id or a layout name. Widget ids
        and positions are restored exactly.
        """
        resolved = layout if isinstance(layout, GridLayoutData) else self.find_layout(layout)
        widgets = [
            record.to_widget(content_factory(record) if content_factory is not None else None)
            for record in resolved.widgets
        ]
        issues = manager.replace_all(resolved.configuration, widgets)
        if issues:
            raise LayoutDecodeError(f"Layout '{resolved.name}' is invalid: {issues[0].describe()}")
        if resolved.id in self._layouts:
            self._current_layout_id = resolved.id
        logger.info("layout_loaded id=%s name=%s", resolved.id, resolved.name)
        return resolved

    def rename_layout(self, layout_id: str, new_name: str) -> GridLayoutData:
        layout = self._layouts.get(layout_id)
        if layout is None:
            raise LayoutNotFoundError(layout_id)
        renamed = replace(layout, name=_validate_name(new_name), last_modified=self._clock())
        self.store(renamed)
        return renamed

    def delete_layout(self, layout_id: str) -> bool:
        """Delete a named layout. Returns whether anything was removed.

        Ids that cannot name a stored layout, the autosave slot included, are
        reported as not found.
        """
        try:
            removed = self._repository.delete(layout_id)
        except ValueError:
            logger.debug("layout_delete_rejected id=%r reason=invalid_id", layout_id)
            return False
        removed = self._layouts.pop(layout_id, None) is not None or removed
        if self._current_layout_id == layout_id:
            self._current_layout_id = None
        if removed:
            logger.info("layout_deleted id=%s", layout_id)
        return removed

    def export_layout(self, layout_id: str) -> bytes:
        """Encode a stored layout as a portable document."""
        layout = self._layouts.get(layout_id)
        if layout is None:
            raise LayoutNotFoundError(layout_id)
        return encode_layout(layout)

    def import_layout(self, data: bytes | str) -> str:
        """Store an exported document as a new layout with a fresh id."""
        layout = decode_layout(data)
        new_id = self._new_id()
        while new_id in self._layouts:
            new_id = self._new_id()
        self.store(replace(layout, id=new_id))
        logger.info("layout_imported id=%s name=%s", new_id, layout.name)
        return new_id

    def auto_save_layout(self, manager: GridManager) -> GridLayoutData:
        """Overwrite the reserved autosave slot with the manager's state."""
        layout = capture_layout(manager, AUTOSAVE_NAME, layout_id=AUTOSAVE_SLOT, now=self._clock())
        self._repository.write_auto(encode_layout(layout))
        logger.debug("layout_autosaved widgets=%d", len(layout.widgets))
        return layout

    def load_auto_layout(self) -> GridLayoutData | None:
        data = self._repository.read_auto()
        if data is None:
            return None
        return decode_layout(data)

    def restore_auto_layout(
        self, manager: GridManager, content_factory: ContentFactory | None = None
    ) -> bool:
        """Load the autosave slot into a manager if one exists."""
        layout = self.load_auto_layout()
        if layout is None:
            return False
        self.load_layout(layout, manager, content_factory)
        return True


def _validate_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Layout name cannot be empty.")
    return cleaned
