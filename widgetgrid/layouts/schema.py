"""Layout snapshot model and versioned document codec."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from widgetgrid.core.manager import GridManager
from widgetgrid.core.models import (
    GridBounds,
    GridConfiguration,
    GridPosition,
    GridSize,
    Widget,
    WidgetContent,
)
from widgetgrid.core.placement import validate_layout
from widgetgrid.infra.json_codec import dumps_bytes, loads_bytes
from widgetgrid.layouts.errors import LayoutDecodeError, UnsupportedSchemaError

SCHEMA_VERSION = 1
SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({SCHEMA_VERSION})


@dataclass(frozen=True, slots=True)
class WidgetRecord:
    """Serializable placement fields of one widget."""

    id: str
    size: GridSize
    position: GridPosition
    enabled: bool = True
    category: str = "utilities"
    title: str = ""

    @classmethod
    def from_widget(cls, widget: Widget) -> WidgetRecord:
        return cls(
            id=widget.id,
            size=widget.size,
            position=widget.position,
            enabled=widget.enabled,
            category=widget.category,
            title=widget.title,
        )

    def to_widget(self, content: WidgetContent | None = None) -> Widget:
        return Widget(
            id=self.id,
            size=self.size,
            position=self.position,
            enabled=self.enabled,
            category=self.category,
            title=self.title,
            content=content,
        )


@dataclass(frozen=True, slots=True)
class GridLayoutData:
    """Immutable snapshot of a grid manager's full state."""

    id: str
    name: str
    last_modified: datetime
    configuration: GridConfiguration
    widgets: tuple[WidgetRecord, ...]
    schema_version: int = SCHEMA_VERSION


def capture_layout(
    manager: GridManager, name: str, *, layout_id: str, now: datetime
) -> GridLayoutData:
    """Snapshot a manager. The result shares no mutable state with it."""
    return GridLayoutData(
        id=layout_id,
        name=name,
        last_modified=now,
        configuration=manager.configuration,
        widgets=tuple(WidgetRecord.from_widget(widget) for widget in manager.widgets),
    )


def layout_to_payload(layout: GridLayoutData) -> dict[str, object]:
    """Convert a snapshot to its JSON-serializable document."""
    config = layout.configuration
    return {
        "schemaVersion": layout.schema_version,
        "id": layout.id,
        "name": layout.name,
        "lastModified": layout.last_modified.isoformat(),
        "configuration": {
            "columns": config.bounds.columns,
            "cellSize": config.cell_size,
            "spacing": config.cell_spacing,
        },
        "widgets": [
            {
                "id": record.id,
                "size": record.size.value,
                "row": record.position.row,
                "column": record.position.column,
                "enabled": record.enabled,
                "category": record.category,
                "title": record.title,
            }
            for record in layout.widgets
        ],
    }


def payload_to_layout(payload: object) -> GridLayoutData:
    """Validate a loaded document and convert it into a snapshot."""
    if not isinstance(payload, dict):
        raise LayoutDecodeError("Layout document must be an object.")
    version = payload.get("schemaVersion")
    if isinstance(version, bool) or not isinstance(version, int):
        raise UnsupportedSchemaError(version)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaError(version)

    layout_id = _require_text(payload, "id")
    name = _require_text(payload, "name")
    last_modified = _parse_timestamp(payload.get("lastModified"))
    configuration = _parse_configuration(payload.get("configuration"))

    raw_widgets = payload.get("widgets")
    if not isinstance(raw_widgets, list):
        raise LayoutDecodeError("Layout widgets must be a list.")
    records = tuple(_parse_widget(item) for item in raw_widgets)

    issues = validate_layout([record.to_widget() for record in records], configuration.bounds)
    if issues:
        raise LayoutDecodeError(f"Layout '{name}' is invalid: {issues[0].describe()}")
    return GridLayoutData(
        id=layout_id,
        name=name,
        last_modified=last_modified,
        configuration=configuration,
        widgets=records,
        schema_version=version,
    )


def encode_layout(layout: GridLayoutData, *, pretty: bool = True) -> bytes:
    return dumps_bytes(layout_to_payload(layout), pretty=pretty)


def decode_layout(data: bytes | str) -> GridLayoutData:
    """Parse document bytes into a validated snapshot."""
    try:
        payload = loads_bytes(data)
    except ValueError as exc:
        raise LayoutDecodeError("Layout document is not valid JSON.") from exc
    return payload_to_layout(payload)


def _require_text(payload: dict[str, object], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise LayoutDecodeError(f"Layout field '{key}' must be a non-empty string.")
    return value.strip()


def _require_int(payload: dict[str, object], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise LayoutDecodeError(f"Field '{key}' must be an integer.")
    return value


def _require_number(payload: dict[str, object], key: str) -> float:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LayoutDecodeError(f"Field '{key}' must be a number.")
    return float(value)


def _parse_timestamp(value: object) -> datetime:
    if not isinstance(value, str):
        raise LayoutDecodeError("Layout lastModified must be an ISO-8601 string.")
    try:
        stamp = datetime.fromisoformat(value)
    except ValueError as exc:
        raise LayoutDecodeError("Layout lastModified must be an ISO-8601 string.") from exc
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=UTC)
    return stamp


def _parse_configuration(value: object) -> GridConfiguration:
    if not isinstance(value, dict):
        raise LayoutDecodeError("Layout configuration must be an object.")
    columns = _require_int(value, "columns")
    cell_size = _require_number(value, "cellSize")
    spacing = _require_number(value, "spacing")
    try:
        return GridConfiguration(
            cell_size=cell_size, cell_spacing=spacing, bounds=GridBounds(columns)
        )
    except ValueError as exc:
        raise LayoutDecodeError(f"Invalid layout configuration: {exc}") from exc


def _parse_widget(item: object) -> WidgetRecord:
    if not isinstance(item, dict):
        raise LayoutDecodeError("Each layout widget must be an object.")
    widget_id = _require_text(item, "id")
    try:
        size = GridSize(str(item["size"]))
    except (KeyError, ValueError) as exc:
        raise LayoutDecodeError(f"Widget '{widget_id}' has an unknown size.") from exc
    row = _require_int(item, "row")
    column = _require_int(item, "column")
    enabled = item.get("enabled", True)
    if not isinstance(enabled, bool):
        raise LayoutDecodeError(f"Widget '{widget_id}' enabled flag must be a boolean.")
    category = item.get("category", "utilities")
    title = item.get("title", "")
    if not isinstance(category, str) or not isinstance(title, str):
        raise LayoutDecodeError(f"Widget '{widget_id}' category and title must be strings.")
    return WidgetRecord(
        id=widget_id,
        size=size,
        position=GridPosition(row, column),
        enabled=enabled,
        category=category,
        title=title,
    )
