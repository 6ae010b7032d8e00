"""Auto-placement and layout validation."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from enum import StrEnum

from widgetgrid.core.collision import OccupancyGrid, has_collision, out_of_bounds
from widgetgrid.core.models import GridBounds, GridPosition, GridSize, Widget, occupied_cells


class IssueKind(StrEnum):
    """Layout validation problem categories."""

    DUPLICATE_ID = "DUPLICATE_ID"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    OVERLAP = "OVERLAP"


@dataclass(frozen=True, slots=True)
class LayoutIssue:
    """Single validation problem found in a widget set."""

    kind: IssueKind
    widget_id: str
    other_id: str | None = None
    cells: frozenset[GridPosition] = frozenset()

    def describe(self) -> str:
        if self.kind is IssueKind.DUPLICATE_ID:
            return f"Duplicate widget id {self.widget_id}."
        if self.kind is IssueKind.OUT_OF_BOUNDS:
            return f"Widget {self.widget_id} extends outside the grid."
        cells = ", ".join(str(cell) for cell in sorted(self.cells))
        return f"Widgets {self.widget_id} and {self.other_id} overlap at {cells}."


def find_available_position(
    size: GridSize,
    avoiding: Collection[GridPosition],
    bounds: GridBounds,
) -> GridPosition | None:
    """Return the first free position in row-major order.

    Each candidate is tested with ``has_collision``. Only row 0 and the rows
    directly below occupied rows are visited, so the scan stays short however
    deep widgets sit. None is returned only when the footprint is wider than
    the grid.
    """
    return _first_free(OccupancyGrid(avoiding, bounds), size)


def _first_free(grid: OccupancyGrid, size: GridSize) -> GridPosition | None:
    columns = grid.bounds.columns
    if size.width > columns:
        return None
    for row in grid.candidate_rows():
        for column in range(columns - size.width + 1):
            candidate = GridPosition(row, column)
            if not has_collision(occupied_cells(size, candidate), grid, grid.bounds):
                return candidate
    return None


def validate_layout(widgets: Sequence[Widget], bounds: GridBounds) -> list[LayoutIssue]:
    """Check a widget set against the id, bounds and overlap invariants."""
    issues: list[LayoutIssue] = []
    seen: set[str] = set()
    claimed: dict[GridPosition, str] = {}

    for widget in widgets:
        if widget.id in seen:
            issues.append(LayoutIssue(IssueKind.DUPLICATE_ID, widget.id))
            continue
        seen.add(widget.id)
        cells = widget.cells
        if out_of_bounds(cells, bounds):
            issues.append(LayoutIssue(IssueKind.OUT_OF_BOUNDS, widget.id, cells=cells))
            continue
        if not widget.enabled:
            continue
        overlaps: dict[str, set[GridPosition]] = {}
        for cell in cells:
            owner = claimed.get(cell)
            if owner is not None:
                overlaps.setdefault(owner, set()).add(cell)
            else:
                claimed[cell] = widget.id
        for owner, shared in overlaps.items():
            issues.append(LayoutIssue(IssueKind.OVERLAP, widget.id, owner, frozenset(shared)))
    return issues


def compact_layout(widgets: Sequence[Widget], bounds: GridBounds) -> dict[str, GridPosition]:
    """Re-place enabled widgets toward the top-left, keeping their reading order.

    Disabled widgets are left out of the result and claim nothing.
    """
    ordered = sorted((w for w in widgets if w.enabled), key=lambda w: w.position)
    grid = OccupancyGrid((), bounds)
    placements: dict[str, GridPosition] = {}
    for widget in ordered:
        target = _first_free(grid, widget.size) or widget.position
        grid.mark(widget.size, target)
        placements[widget.id] = target
    return placements
