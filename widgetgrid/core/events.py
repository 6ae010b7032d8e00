"""Grid change notifications and a lightweight event bus."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from widgetgrid.core.models import GridConfiguration, GridPosition

TEvent = TypeVar("TEvent")
EventHandler = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class Subscription:
    """Opaque subscription token."""

    id: int


class EventBus:
    """Simple in-process pub/sub for grid observers."""

    def __init__(self) -> None:
        self._next_id = 1
        self._subscriptions: dict[int, tuple[type[object], EventHandler]] = {}

    def subscribe(
        self,
        event_type: type[TEvent],
        handler: Callable[[TEvent], None],
    ) -> Subscription:
        """Subscribe handler for an event type and its subclasses."""
        sub_id = self._next_id
        self._next_id += 1
        self._subscriptions[sub_id] = (event_type, handler)
        return Subscription(sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription if present."""
        self._subscriptions.pop(subscription.id, None)

    def publish(self, event: object) -> int:
        """Publish one event and return number of invoked handlers."""
        invoked = 0
        for subscribed_type, handler in tuple(self._subscriptions.values()):
            if isinstance(event, subscribed_type):
                handler(event)
                invoked += 1
        return invoked


@dataclass(frozen=True, slots=True)
class GridEvent:
    """Base class for committed grid mutations."""


@dataclass(frozen=True, slots=True)
class WidgetAdded(GridEvent):
    widget_id: str
    position: GridPosition


@dataclass(frozen=True, slots=True)
class WidgetRemoved(GridEvent):
    widget_id: str


@dataclass(frozen=True, slots=True)
class WidgetMoved(GridEvent):
    widget_id: str
    old_position: GridPosition
    new_position: GridPosition


@dataclass(frozen=True, slots=True)
class WidgetToggled(GridEvent):
    widget_id: str
    enabled: bool
    position: GridPosition


@dataclass(frozen=True, slots=True)
class GridCleared(GridEvent):
    removed_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class LayoutCompacted(GridEvent):
    moved_ids: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ConfigurationChanged(GridEvent):
    configuration: GridConfiguration


@dataclass(frozen=True, slots=True)
class LayoutReplaced(GridEvent):
    widget_ids: tuple[str, ...]
    configuration: GridConfiguration
