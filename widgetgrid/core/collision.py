"""Collision detection for widget footprints."""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator

import numpy as np

from widgetgrid.core.models import GridBounds, GridPosition, GridSize, Widget, occupied_cells


def out_of_bounds(cells: Iterable[GridPosition], bounds: GridBounds) -> bool:
    """Return whether any cell falls outside the grid."""
    return any(not bounds.contains(cell) for cell in cells)


def has_collision(
    footprint: Collection[GridPosition],
    occupied_by_others: Collection[GridPosition],
    bounds: GridBounds,
) -> bool:
    """Return whether a footprint leaves the grid or overlaps occupied cells."""
    if out_of_bounds(footprint, bounds):
        return True
    return any(cell in occupied_by_others for cell in footprint)


def occupancy(widgets: Iterable[Widget], excluding: Collection[str] = ()) -> frozenset[GridPosition]:
    """Union of enabled widget footprints, skipping excluded ids."""
    cells: set[GridPosition] = set()
    for widget in widgets:
        if not widget.enabled or widget.id in excluding:
            continue
        cells.update(widget.cells)
    return frozenset(cells)


def widgets_overlap(
    first: GridSize,
    first_position: GridPosition,
    second: GridSize,
    second_position: GridPosition,
) -> bool:
    """Bounding-box overlap test for two footprints."""
    return not (
        first_position.row + first.height - 1 < second_position.row
        or second_position.row + second.height - 1 < first_position.row
        or first_position.column + first.width - 1 < second_position.column
        or second_position.column + second.width - 1 < first_position.column
    )


def find_colliding_widgets(
    size: GridSize,
    position: GridPosition,
    widgets: Iterable[Widget],
    excluding: Collection[str] = (),
) -> list[Widget]:
    """Return enabled widgets whose footprint overlaps the candidate."""
    return [
        widget
        for widget in widgets
        if widget.enabled
        and widget.id not in excluding
        and widgets_overlap(size, position, widget.size, widget.position)
    ]


class OccupancyGrid:
    """Numpy occupancy mask over the occupied rows of a grid.

    Only rows holding at least one occupied cell get a mask row, so memory
    follows the number of occupied rows rather than how deep they sit.
    """

    def __init__(self, occupied: Iterable[GridPosition], bounds: GridBounds) -> None:
        inside = [cell for cell in occupied if bounds.contains(cell)]
        self.bounds = bounds
        self._slots: dict[int, int] = {}
        for row in sorted({cell.row for cell in inside}):
            self._slots[row] = len(self._slots)
        self.mask = np.zeros((len(self._slots), bounds.columns), dtype=np.bool_)
        for cell in inside:
            self.mask[self._slots[cell.row], cell.column] = True

    @property
    def rows(self) -> list[int]:
        """Occupied rows, top to bottom."""
        return sorted(self._slots)

    def __contains__(self, cell: object) -> bool:
        if not isinstance(cell, GridPosition):
            return False
        slot = self._slots.get(cell.row)
        if slot is None or not 0 <= cell.column < self.bounds.columns:
            return False
        return bool(self.mask[slot, cell.column])

    def __iter__(self) -> Iterator[GridPosition]:
        return iter(sorted(self.cells()))

    def __len__(self) -> int:
        return int(np.count_nonzero(self.mask))

    def collides(self, size: GridSize, position: GridPosition) -> bool:
        """Return whether the footprint leaves the grid or hits a set cell."""
        return has_collision(occupied_cells(size, position), self, self.bounds)

    def candidate_rows(self) -> list[int]:
        """Rows where a row-major first-fit scan can find its answer.

        The first free position sits on row 0 or directly below an occupied
        row; any other row has an empty row above it that fits just as well.
        """
        return sorted({0, *(row + 1 for row in self._slots)})

    def cells(self) -> frozenset[GridPosition]:
        """Cells currently marked in the mask."""
        by_slot = {slot: row for row, slot in self._slots.items()}
        slots, columns = np.nonzero(self.mask)
        return frozenset(GridPosition(by_slot[int(s)], int(c)) for s, c in zip(slots, columns))

    def mark(self, size: GridSize, position: GridPosition) -> None:
        """Mark a footprint as occupied, adding mask rows as needed."""
        cells = [cell for cell in occupied_cells(size, position) if self.bounds.contains(cell)]
        new_rows = sorted({cell.row for cell in cells} - self._slots.keys())
        if new_rows:
            for row in new_rows:
                self._slots[row] = len(self._slots)
            grown = np.zeros((len(self._slots), self.bounds.columns), dtype=np.bool_)
            grown[: self.mask.shape[0]] = self.mask
            self.mask = grown
        for cell in cells:
            self.mask[self._slots[cell.row], cell.column] = True
