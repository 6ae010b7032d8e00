"""Stateful owner of the widget collection and its placement invariants."""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from dataclasses import replace

from widgetgrid.core.collision import has_collision, occupancy
from widgetgrid.core.events import (
    ConfigurationChanged,
    EventBus,
    GridCleared,
    LayoutCompacted,
    LayoutReplaced,
    WidgetAdded,
    WidgetMoved,
    WidgetRemoved,
    WidgetToggled,
)
from widgetgrid.core.geometry import Rect, frame_rect, grid_height, grid_width
from widgetgrid.core.models import GridConfiguration, GridPosition, Widget, occupied_cells
from widgetgrid.core.placement import LayoutIssue, compact_layout, find_available_position, validate_layout

logger = logging.getLogger(__name__)


class GridManager:
    """Widget collection with non-overlap, bounds and unique-id guarantees.

    Every mutator either commits and publishes one event on ``events`` or
    returns False and leaves state untouched. Not thread-safe: all calls are
    expected on one sequential context.
    """

    def __init__(
        self,
        configuration: GridConfiguration | None = None,
        *,
        events: EventBus | None = None,
    ) -> None:
        self._configuration = configuration or GridConfiguration.STANDARD
        self._widgets: dict[str, Widget] = {}
        self.events = events or EventBus()

    @property
    def configuration(self) -> GridConfiguration:
        return self._configuration

    @property
    def widgets(self) -> list[Widget]:
        """Widgets in insertion order."""
        return list(self._widgets.values())

    @property
    def occupied_positions(self) -> frozenset[GridPosition]:
        """Cells claimed by enabled widgets, derived from the current set."""
        return occupancy(self._widgets.values())

    def __len__(self) -> int:
        return len(self._widgets)

    def __contains__(self, widget_id: object) -> bool:
        return widget_id in self._widgets

    def widget(self, widget_id: str) -> Widget | None:
        return self._widgets.get(widget_id)

    def widget_at(self, position: GridPosition) -> Widget | None:
        """Return the enabled widget covering a cell, if any."""
        for widget in self._widgets.values():
            if widget.enabled and position in widget.cells:
                return widget
        return None

    def containers(self, category: str) -> list[Widget]:
        """Widgets tagged with a category, for UI grouping."""
        return [widget for widget in self._widgets.values() if widget.category == category]

    def can_place_widget(
        self,
        widget: Widget,
        position: GridPosition,
        excluding: Collection[str] | None = None,
    ) -> bool:
        """Return whether the widget fits at a position among the other enabled widgets."""
        excluded = {widget.id} if excluding is None else set(excluding)
        footprint = occupied_cells(widget.size, position)
        others = occupancy(self._widgets.values(), excluded)
        return not has_collision(footprint, others, self._configuration.bounds)

    def add_widget(self, widget: Widget, position: GridPosition | None = None) -> bool:
        """Insert a widget, auto-placing it when no usable position is given."""
        if widget.id in self._widgets:
            logger.warning("widget_add_rejected id=%s reason=duplicate_id", widget.id)
            return False
        target = position
        if target is None or not self.can_place_widget(widget, target):
            target = find_available_position(
                widget.size, self.occupied_positions, self._configuration.bounds
            )
        if target is None:
            logger.warning(
                "widget_add_rejected id=%s reason=no_space size=%s", widget.id, widget.size.value
            )
            return False
        placed = replace(widget, position=target)
        self._widgets[placed.id] = placed
        logger.debug("widget_added id=%s position=%s size=%s", placed.id, target, placed.size.value)
        self.events.publish(WidgetAdded(widget_id=placed.id, position=target))
        return True

    def remove_widget(self, widget_id: str) -> bool:
        if self._widgets.pop(widget_id, None) is None:
            logger.debug("widget_remove_missing id=%s", widget_id)
            return False
        logger.debug("widget_removed id=%s", widget_id)
        self.events.publish(WidgetRemoved(widget_id=widget_id))
        return True

    def remove_all_widgets(self) -> None:
        removed = tuple(self._widgets)
        self._widgets.clear()
        if removed:
            logger.debug("grid_cleared count=%d", len(removed))
            self.events.publish(GridCleared(removed_ids=removed))

    def move_widget(self, widget_id: str, position: GridPosition) -> bool:
        """Move a widget if the target is free of other enabled widgets."""
        widget = self._widgets.get(widget_id)
        if widget is None:
            logger.debug("widget_move_missing id=%s", widget_id)
            return False
        if not self.can_place_widget(widget, position, excluding={widget_id}):
            logger.debug("widget_move_rejected id=%s target=%s", widget_id, position)
            return False
        if position == widget.position:
            return True
        self._widgets[widget_id] = replace(widget, position=position)
        logger.debug("widget_moved id=%s from=%s to=%s", widget_id, widget.position, position)
        self.events.publish(
            WidgetMoved(widget_id=widget_id, old_position=widget.position, new_position=position)
        )
        return True

    def toggle_enabled(self, widget_id: str) -> bool:
        """Flip the enabled flag.

        A re-enabled widget whose cells were claimed meanwhile is auto-placed;
        the toggle fails when no position exists.
        """
        widget = self._widgets.get(widget_id)
        if widget is None:
            return False
        if widget.enabled:
            updated = replace(widget, enabled=False)
        else:
            position: GridPosition | None = widget.position
            if not self.can_place_widget(widget, widget.position):
                position = find_available_position(
                    widget.size, self.occupied_positions, self._configuration.bounds
                )
            if position is None:
                logger.warning("widget_enable_rejected id=%s reason=no_space", widget_id)
                return False
            updated = replace(widget, enabled=True, position=position)
        self._widgets[widget_id] = updated
        self.events.publish(
            WidgetToggled(widget_id=widget_id, enabled=updated.enabled, position=updated.position)
        )
        return True

    def validate_layout(self) -> list[LayoutIssue]:
        return validate_layout(self.widgets, self._configuration.bounds)

    def compact_layout(self) -> bool:
        """Pull enabled widgets toward the top-left. Returns whether anything moved."""
        placements = compact_layout(self.widgets, self._configuration.bounds)
        moved = tuple(
            widget_id
            for widget_id, position in placements.items()
            if self._widgets[widget_id].position != position
        )
        if not moved:
            return False
        for widget_id in moved:
            self._widgets[widget_id] = replace(self._widgets[widget_id], position=placements[widget_id])
        logger.info("layout_compacted moved=%d", len(moved))
        self.events.publish(LayoutCompacted(moved_ids=moved))
        return True

    def update_configuration(self, configuration: GridConfiguration) -> bool:
        """Swap metrics/bounds unless current widgets would stop fitting."""
        issues = validate_layout(self.widgets, configuration.bounds)
        if issues:
            logger.warning("configuration_rejected issues=%d", len(issues))
            return False
        if configuration != self._configuration:
            self._configuration = configuration
            self.events.publish(ConfigurationChanged(configuration=configuration))
        return True

    def replace_all(
        self, configuration: GridConfiguration, widgets: Iterable[Widget]
    ) -> list[LayoutIssue]:
        """Atomically replace configuration and widgets.

        Widgets keep their ids and positions. Nothing changes when the new set
        is invalid; the problems are returned instead.
        """
        staged = list(widgets)
        issues = validate_layout(staged, configuration.bounds)
        if issues:
            logger.warning("layout_replace_rejected issues=%d", len(issues))
            return issues
        self._configuration = configuration
        self._widgets = {widget.id: widget for widget in staged}
        self.events.publish(
            LayoutReplaced(widget_ids=tuple(self._widgets), configuration=configuration)
        )
        return []

    @property
    def content_rows(self) -> int:
        """Number of rows spanned by enabled widgets."""
        return max(
            (w.position.row + w.size.height for w in self._widgets.values() if w.enabled),
            default=0,
        )

    def content_size(self) -> tuple[float, float]:
        return grid_width(self._configuration), grid_height(self._configuration, self.content_rows)

    def frames(self) -> list[tuple[Widget, Rect]]:
        """Frame rectangles of enabled widgets in insertion (z) order."""
        return [
            (widget, frame_rect(widget.size, widget.position, self._configuration))
            for widget in self._widgets.values()
            if widget.enabled
        ]

    def render(self, theme: object) -> int:
        """Hand each enabled widget's content its frame. Returns widgets rendered."""
        rendered = 0
        for widget, frame in self.frames():
            if widget.content is None:
                continue
            widget.content.render(frame, theme)
            rendered += 1
        return rendered

    def describe(self) -> str:
        lines = [f"GridManager({self._configuration.bounds})", f"Widgets: {len(self._widgets)}"]
        for widget in sorted(self._widgets.values(), key=lambda w: w.position):
            state = "" if widget.enabled else " [disabled]"
            label = widget.title or widget.id
            lines.append(f"- {label} at {widget.position} ({widget.size.value}){state}")
        return "\n".join(lines)
