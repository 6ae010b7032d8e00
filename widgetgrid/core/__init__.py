"""Grid model, collision and placement rules."""

from widgetgrid.core.collision import OccupancyGrid, find_colliding_widgets, has_collision, occupancy
from widgetgrid.core.events import (
    ConfigurationChanged,
    EventBus,
    GridCleared,
    GridEvent,
    LayoutCompacted,
    LayoutReplaced,
    Subscription,
    WidgetAdded,
    WidgetMoved,
    WidgetRemoved,
    WidgetToggled,
)
from widgetgrid.core.geometry import Rect, frame_rect, grid_position
from widgetgrid.core.manager import GridManager
from widgetgrid.core.models import (
    CONFIGURATION_PRESETS,
    GridBounds,
    GridConfiguration,
    GridPosition,
    GridSize,
    Widget,
    WidgetCategory,
    WidgetContent,
    new_widget_id,
    occupied_cells,
)
from widgetgrid.core.placement import (
    IssueKind,
    LayoutIssue,
    compact_layout,
    find_available_position,
    validate_layout,
)

__all__ = [
    "CONFIGURATION_PRESETS",
    "ConfigurationChanged",
    "EventBus",
    "GridBounds",
    "GridCleared",
    "GridConfiguration",
    "GridEvent",
    "GridManager",
    "GridPosition",
    "GridSize",
    "IssueKind",
    "LayoutCompacted",
    "LayoutIssue",
    "LayoutReplaced",
    "OccupancyGrid",
    "Rect",
    "Subscription",
    "Widget",
    "WidgetAdded",
    "WidgetCategory",
    "WidgetContent",
    "WidgetMoved",
    "WidgetRemoved",
    "WidgetToggled",
    "compact_layout",
    "find_available_position",
    "find_colliding_widgets",
    "frame_rect",
    "grid_position",
    "has_collision",
    "new_widget_id",
    "occupancy",
    "occupied_cells",
    "validate_layout",
]
