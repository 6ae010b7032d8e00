"""Drag-to-reposition interaction state."""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from enum import Enum, auto

from widgetgrid.core.events import GridCleared, LayoutReplaced, Subscription, WidgetRemoved
from widgetgrid.core.geometry import frame_position, grid_position
from widgetgrid.core.manager import GridManager
from widgetgrid.core.models import GridPosition, occupied_cells

logger = logging.getLogger(__name__)


class DragPhase(Enum):
    """Drag session phases."""

    IDLE = auto()
    DRAGGING = auto()


@dataclass(frozen=True, slots=True)
class DragState:
    """Preview of an in-flight drag."""

    phase: DragPhase
    widget_id: str | None = None
    preview: GridPosition | None = None
    is_valid: bool = False
    grab_offset: tuple[int, int] = (0, 0)


IDLE = DragState(phase=DragPhase.IDLE)

# One active drag per grid, shared by every session on the same manager.
_ACTIVE_DRAGS: weakref.WeakKeyDictionary[GridManager, weakref.ref[DragSession]] = (
    weakref.WeakKeyDictionary()
)


@dataclass(frozen=True, slots=True)
class DragOutcome:
    """Result of ending a drag."""

    committed: bool
    widget_id: str | None
    position: GridPosition | None
    status: str


class DragSession:
    """Preview, commit and cancel one widget move at a time.

    Holds only the dragged widget's id and resolves it through the manager on
    every access. The manager is never mutated before release.
    """

    def __init__(self, manager: GridManager) -> None:
        self._manager = manager
        self._state = IDLE
        self._subscriptions: list[Subscription] = [
            manager.events.subscribe(WidgetRemoved, self._on_widget_removed),
            manager.events.subscribe(GridCleared, self._on_grid_cleared),
            manager.events.subscribe(LayoutReplaced, self._on_layout_replaced),
        ]

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state.phase is DragPhase.DRAGGING

    def begin(self, widget_id: str, grab: tuple[float, float] | None = None) -> bool:
        """Start dragging a widget. Ignored while any session drags on this grid.

        ``grab`` is the pointer location at press time; the grabbed cell's
        offset inside the widget is kept while dragging.
        """
        owner = active_drag(self._manager)
        if owner is not None:
            logger.debug("drag_begin_ignored id=%s active=%s", widget_id, owner.state.widget_id)
            return False
        widget = self._manager.widget(widget_id)
        if widget is None:
            return False
        offset = (0, 0)
        if grab is not None:
            cell = grid_position(grab[0], grab[1], self._manager.configuration)
            if cell is not None:
                offset = (
                    _clamp(cell.row - widget.position.row, widget.size.height),
                    _clamp(cell.column - widget.position.column, widget.size.width),
                )
        self._state = DragState(
            phase=DragPhase.DRAGGING,
            widget_id=widget_id,
            preview=widget.position,
            is_valid=True,
            grab_offset=offset,
        )
        _ACTIVE_DRAGS[self._manager] = weakref.ref(self)
        return True

    def update(self, x: float, y: float) -> DragState:
        """Recompute the preview for a pointer move. Advisory only."""
        if not self.is_dragging:
            return self._state
        widget_id = self._state.widget_id
        widget = self._manager.widget(widget_id) if widget_id is not None else None
        if widget is None:
            self.cancel()
            return self._state
        preview = self._preview_for_pointer(x, y)
        is_valid = preview is not None and self._manager.can_place_widget(
            widget, preview, excluding={widget.id}
        )
        self._state = DragState(
            phase=DragPhase.DRAGGING,
            widget_id=widget.id,
            preview=preview,
            is_valid=is_valid,
            grab_offset=self._state.grab_offset,
        )
        return self._state

    def release(self, x: float | None = None, y: float | None = None) -> DragOutcome:
        """Commit the previewed move when valid, otherwise cancel."""
        if not self.is_dragging:
            return DragOutcome(
                committed=False, widget_id=None, position=None, status="No drag in progress."
            )
        if x is not None and y is not None:
            self.update(x, y)
            if not self.is_dragging:
                return DragOutcome(
                    committed=False, widget_id=None, position=None, status="Drag cancelled."
                )
        state = self._state
        if state.widget_id is None or state.preview is None or not state.is_valid:
            return self.cancel()
        moved = self._manager.move_widget(state.widget_id, state.preview)
        self._finish()
        if not moved:
            return DragOutcome(
                committed=False,
                widget_id=state.widget_id,
                position=None,
                status="Invalid drop position.",
            )
        return DragOutcome(
            committed=True,
            widget_id=state.widget_id,
            position=state.preview,
            status=f"Moved widget to {state.preview}.",
        )

    def cancel(self) -> DragOutcome:
        """Drop the preview without touching the grid."""
        widget_id = self._state.widget_id
        self._finish()
        return DragOutcome(committed=False, widget_id=widget_id, position=None, status="Drag cancelled.")

    def preview_cells(self) -> frozenset[GridPosition]:
        """Cells to highlight for the current preview."""
        state = self._state
        if state.preview is None or state.widget_id is None:
            return frozenset()
        widget = self._manager.widget(state.widget_id)
        if widget is None:
            return frozenset()
        return occupied_cells(widget.size, state.preview)

    def preview_origin(self) -> tuple[float, float] | None:
        """Frame position of the preview's top-left corner."""
        if self._state.preview is None:
            return None
        return frame_position(self._state.preview, self._manager.configuration)

    def close(self) -> None:
        """Cancel any drag and stop listening to the manager."""
        self.cancel()
        for subscription in self._subscriptions:
            self._manager.events.unsubscribe(subscription)
        self._subscriptions.clear()

    def _finish(self) -> None:
        self._state = IDLE
        if active_drag(self._manager) is self:
            del _ACTIVE_DRAGS[self._manager]

    def _preview_for_pointer(self, x: float, y: float) -> GridPosition | None:
        cell = grid_position(x, y, self._manager.configuration)
        if cell is None:
            return None
        row_offset, column_offset = self._state.grab_offset
        return cell.offset(-row_offset, -column_offset)

    def _on_widget_removed(self, event: WidgetRemoved) -> None:
        if self.is_dragging and event.widget_id == self._state.widget_id:
            logger.debug("drag_cancelled id=%s reason=widget_removed", event.widget_id)
            self.cancel()

    def _on_grid_cleared(self, event: GridCleared) -> None:
        if self.is_dragging and self._state.widget_id in event.removed_ids:
            self.cancel()

    def _on_layout_replaced(self, event: LayoutReplaced) -> None:
        if self.is_dragging:
            self.cancel()


def active_drag(manager: GridManager) -> DragSession | None:
    """Return the session currently dragging on a grid, if any."""
    ref = _ACTIVE_DRAGS.get(manager)
    return ref() if ref is not None else None


def _clamp(offset: int, extent: int) -> int:
    return max(0, min(offset, extent - 1))
