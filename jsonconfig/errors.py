"""Error taxonomy shared by the store and its adapters."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Reason attached to a failed OperationResult."""

    NONE = "none"
    FILE_NOT_FOUND = "file_not_found"
    EMPTY_FILE = "empty_file"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"
    IO_ERROR = "io_error"
    CANCELLED = "cancelled"


class ConfigStoreError(Exception):
    """Base class for errors raised by jsonconfig."""


class SerializationError(ConfigStoreError):
    """Raised when a payload cannot be encoded or decoded."""


class InvalidConfigError(ConfigStoreError, ValueError):
    """Raised when a config value handed to the store is absent or invalid."""


class OperationCancelled(ConfigStoreError):
    """Raised at a cancellation checkpoint of an asynchronous operation."""
