from __future__ import annotations

import itertools
import random
from datetime import UTC, datetime, timedelta

import pytest

from widgetgrid.core.manager import GridManager
from widgetgrid.core.models import GridConfiguration, GridPosition, GridSize, Widget
from widgetgrid.layouts.repository import LayoutRepository
from widgetgrid.layouts.service import LayoutPersistence


class StepClock:
    """Deterministic clock that moves forward one second per reading."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1337)


@pytest.fixture
def manager() -> GridManager:
    return GridManager(GridConfiguration.STANDARD)


@pytest.fixture
def make_widget():
    counter = itertools.count(1)

    def _make(
        size: GridSize = GridSize.SMALL,
        position: GridPosition = GridPosition.ZERO,
        *,
        widget_id: str | None = None,
        **fields,
    ) -> Widget:
        return Widget(id=widget_id or f"w-{next(counter)}", size=size, position=position, **fields)

    return _make


@pytest.fixture
def clock() -> StepClock:
    return StepClock(datetime(2026, 1, 1, 9, 0, tzinfo=UTC))


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"layout-{next(counter)}"


@pytest.fixture
def repository(tmp_path):
    repo = LayoutRepository(tmp_path / "layouts")
    repo.open()
    yield repo
    repo.close()


@pytest.fixture
def persistence(repository, clock, id_factory) -> LayoutPersistence:
    return LayoutPersistence(repository, clock=clock, id_factory=id_factory)


@pytest.fixture
def random_widgets(seeded_rng):
    """Build a valid random widget set by auto-placing into a scratch manager."""

    def _build(count: int, configuration: GridConfiguration = GridConfiguration.STANDARD) -> list[Widget]:
        scratch = GridManager(configuration)
        sizes = list(GridSize)
        for index in range(count):
            size = seeded_rng.choice(sizes)
            position = GridPosition(
                seeded_rng.randrange(0, 12),
                seeded_rng.randrange(0, configuration.columns),
            )
            scratch.add_widget(
                Widget(
                    id=f"rand-{index}",
                    size=size,
                    enabled=seeded_rng.random() > 0.2,
                    title=f"Widget {index}",
                ),
                position,
            )
        return scratch.widgets

    return _build


@pytest.fixture
def app_data(monkeypatch, tmp_path):
    """Point the app-data root at a temp dir and clear other workspace settings."""
    root = tmp_path / "appdata"
    monkeypatch.setenv("WIDGETGRID_APP_DATA_DIR", str(root))
    for name in (
        "WIDGETGRID_LAYOUTS_DIR",
        "WIDGETGRID_LOG_DIR",
        "WIDGETGRID_LOG_LEVEL",
        "WIDGETGRID_LOG_FORMAT",
        "WIDGETGRID_GRID_PRESET",
        "WIDGETGRID_COLUMNS",
        "WIDGETGRID_CELL_SIZE",
        "WIDGETGRID_CELL_SPACING",
    ):
        monkeypatch.delenv(name, raising=False)
    return root
