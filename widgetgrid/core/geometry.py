"""Conversions between grid cells and continuous frame coordinates."""

from __future__ import annotations

import math
from dataclasses import dataclass

from widgetgrid.core.models import GridConfiguration, GridPosition, GridSize


@dataclass(frozen=True, slots=True)
class Rect:
    """Simple axis-aligned rectangle."""

    x: float
    y: float
    w: float
    h: float

    def contains(self, px: float, py: float) -> bool:
        """Return whether a point is inside the rectangle."""
        return self.x <= px <= self.x + self.w and self.y <= py <= self.y + self.h


def frame_size(size: GridSize, config: GridConfiguration) -> tuple[float, float]:
    """Return the visual (width, height) of a widget footprint."""
    width = size.width * config.cell_size + (size.width - 1) * config.cell_spacing
    height = size.height * config.cell_size + (size.height - 1) * config.cell_spacing
    return width, height


def frame_position(position: GridPosition, config: GridConfiguration) -> tuple[float, float]:
    """Return the top-left (x, y) of a grid cell."""
    return position.column * config.pitch, position.row * config.pitch


def frame_rect(size: GridSize, position: GridPosition, config: GridConfiguration) -> Rect:
    """Return the frame rectangle of a widget footprint at a position."""
    x, y = frame_position(position, config)
    w, h = frame_size(size, config)
    return Rect(x, y, w, h)


def center_position(
    size: GridSize, position: GridPosition, config: GridConfiguration
) -> tuple[float, float]:
    """Return the center point of a widget footprint at a position."""
    rect = frame_rect(size, position, config)
    return rect.x + rect.w / 2, rect.y + rect.h / 2


def grid_width(config: GridConfiguration) -> float:
    """Total frame width of all columns."""
    columns = config.bounds.columns
    return columns * config.cell_size + (columns - 1) * config.cell_spacing


def grid_height(config: GridConfiguration, rows: int) -> float:
    """Frame height needed for the given number of rows."""
    if rows <= 0:
        return 0.0
    return rows * config.cell_size + (rows - 1) * config.cell_spacing


def grid_position(x: float, y: float, config: GridConfiguration) -> GridPosition | None:
    """Convert a canvas point to the grid cell under it.

    Points left of or above the canvas have no cell. Points right of the last
    column snap to the last column; rows are never clamped.
    """
    if x < 0 or y < 0:
        return None
    column = math.floor(x / config.pitch)
    row = math.floor(y / config.pitch)
    column = min(column, config.bounds.columns - 1)
    return GridPosition(row=row, column=column)
