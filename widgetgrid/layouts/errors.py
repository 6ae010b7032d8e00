"""Layout persistence error kinds."""

from __future__ import annotations

from enum import StrEnum


class LayoutErrorKind(StrEnum):
    """Stable identifiers for persistence failures."""

    STORAGE_UNAVAILABLE = "storage_unavailable"
    DECODE_FAILED = "decode_failed"
    UNSUPPORTED_SCHEMA = "unsupported_schema"
    NOT_FOUND = "not_found"


class LayoutPersistenceError(Exception):
    """Base class for layout store failures."""

    kind: LayoutErrorKind


class StorageUnavailableError(LayoutPersistenceError):
    """The backing store could not be read or written."""

    kind = LayoutErrorKind.STORAGE_UNAVAILABLE


class LayoutDecodeError(LayoutPersistenceError):
    """Bytes or payload do not describe a valid layout."""

    kind = LayoutErrorKind.DECODE_FAILED


class UnsupportedSchemaError(LayoutDecodeError):
    """Document schema version is not understood."""

    kind = LayoutErrorKind.UNSUPPORTED_SCHEMA

    def __init__(self, version: object) -> None:
        super().__init__(f"Unsupported layout schema version: {version!r}.")
        self.version = version


class LayoutNotFoundError(LayoutPersistenceError):
    """No stored layout matches the requested id or name."""

    kind = LayoutErrorKind.NOT_FOUND

    def __init__(self, key: str) -> None:
        super().__init__(f"Layout '{key}' not found.")
        self.key = key
