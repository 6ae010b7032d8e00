"""Core grid models and the widget size table."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, Protocol


@dataclass(frozen=True, slots=True, order=True)
class GridPosition:
    """Grid cell address. Origin is top-left; ordering is row-major."""

    row: int
    column: int

    ZERO: ClassVar[GridPosition]

    def offset(self, rows: int, columns: int) -> GridPosition:
        """Return this position shifted by the given deltas."""
        return GridPosition(self.row + rows, self.column + columns)

    def __str__(self) -> str:
        return f"({self.row},{self.column})"


GridPosition.ZERO = GridPosition(0, 0)


class GridSize(StrEnum):
    """Fixed widget footprints."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XLARGE = "xlarge"

    @property
    def width(self) -> int:
        return SIZE_CELLS[self][0]

    @property
    def height(self) -> int:
        return SIZE_CELLS[self][1]

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    @property
    def display_name(self) -> str:
        label = "Extra Large" if self is GridSize.XLARGE else self.value.capitalize()
        return f"{label} ({self.width}x{self.height})"


# (columns wide, rows tall)
SIZE_CELLS: dict[GridSize, tuple[int, int]] = {
    GridSize.SMALL: (1, 1),
    GridSize.MEDIUM: (2, 2),
    GridSize.LARGE: (4, 2),
    GridSize.XLARGE: (4, 4),
}


@dataclass(frozen=True, slots=True)
class GridBounds:
    """Horizontal extent of the grid. Rows grow downward without limit."""

    columns: int

    def __post_init__(self) -> None:
        if self.columns <= 0:
            raise ValueError("Grid columns must be positive.")

    @property
    def is_unlimited(self) -> bool:
        return True

    def contains(self, position: GridPosition) -> bool:
        """Return whether a single cell lies inside the grid."""
        return position.row >= 0 and 0 <= position.column < self.columns

    def __str__(self) -> str:
        return f"{self.columns}-column grid (unlimited rows)"


@dataclass(frozen=True, slots=True)
class GridConfiguration:
    """Cell metrics and bounds for one grid instance."""

    cell_size: float = 120.0
    cell_spacing: float = 8.0
    bounds: GridBounds = field(default_factory=lambda: GridBounds(8))

    STANDARD: ClassVar[GridConfiguration]
    COMPACT: ClassVar[GridConfiguration]
    LARGE: ClassVar[GridConfiguration]

    def __post_init__(self) -> None:
        if self.cell_size <= 0:
            raise ValueError("Cell size must be positive.")
        if self.cell_spacing < 0:
            raise ValueError("Cell spacing must be non-negative.")

    @property
    def columns(self) -> int:
        return self.bounds.columns

    @property
    def pitch(self) -> float:
        """Distance between the top-left corners of adjacent cells."""
        return self.cell_size + self.cell_spacing


GridConfiguration.STANDARD = GridConfiguration()
GridConfiguration.COMPACT = GridConfiguration(cell_size=60.0, cell_spacing=3.0, bounds=GridBounds(6))
GridConfiguration.LARGE = GridConfiguration(cell_size=100.0, cell_spacing=8.0, bounds=GridBounds(8))

CONFIGURATION_PRESETS: dict[str, GridConfiguration] = {
    "standard": GridConfiguration.STANDARD,
    "compact": GridConfiguration.COMPACT,
    "large": GridConfiguration.LARGE,
}


class WidgetCategory(StrEnum):
    """Well-known widget category tags."""

    PRODUCTIVITY = "productivity"
    INFORMATION = "information"
    COMMUNICATION = "communication"
    ENTERTAINMENT = "entertainment"
    UTILITIES = "utilities"
    SYSTEM = "system"
    CUSTOM = "custom"


class WidgetContent(Protocol):
    """Opaque content handle supplied by the host application."""

    def render(self, frame: object, theme: object) -> object: ...


@dataclass(frozen=True, slots=True)
class Widget:
    """Placement-relevant view of one widget."""

    id: str
    size: GridSize
    position: GridPosition = GridPosition.ZERO
    enabled: bool = True
    category: str = WidgetCategory.UTILITIES.value
    title: str = ""
    content: WidgetContent | None = field(default=None, compare=False, repr=False)

    @property
    def cells(self) -> frozenset[GridPosition]:
        """Cells covered at the current position."""
        return occupied_cells(self.size, self.position)


def new_widget_id() -> str:
    """Return a fresh widget/layout identifier."""
    return str(uuid.uuid4())


def occupied_cells(size: GridSize, position: GridPosition) -> frozenset[GridPosition]:
    """Compute the footprint of a widget of the given size at a position."""
    return frozenset(
        GridPosition(position.row + dy, position.column + dx)
        for dy in range(size.height)
        for dx in range(size.width)
    )
