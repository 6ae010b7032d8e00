"""Grid-based widget placement engine with layout persistence."""

from widgetgrid.core import GridConfiguration, GridManager, GridPosition, GridSize, Widget

__all__ = ["GridConfiguration", "GridManager", "GridPosition", "GridSize", "Widget"]
