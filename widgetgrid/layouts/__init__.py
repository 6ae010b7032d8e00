"""Saved layout schema, storage and service."""

from widgetgrid.layouts.errors import (
    LayoutDecodeError,
    LayoutErrorKind,
    LayoutNotFoundError,
    LayoutPersistenceError,
    StorageUnavailableError,
    UnsupportedSchemaError,
)
from widgetgrid.layouts.repository import LayoutRepository
from widgetgrid.layouts.schema import GridLayoutData, WidgetRecord, decode_layout, encode_layout
from widgetgrid.layouts.service import LayoutPersistence

__all__ = [
    "GridLayoutData",
    "LayoutDecodeError",
    "LayoutErrorKind",
    "LayoutNotFoundError",
    "LayoutPersistence",
    "LayoutPersistenceError",
    "LayoutRepository",
    "StorageUnavailableError",
    "UnsupportedSchemaError",
    "WidgetRecord",
    "decode_layout",
    "encode_layout",
]
