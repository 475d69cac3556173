"""Typed JSON config persistence with validated updates and self-healing loads."""

from .cancellation import CancellationToken
from .errors import (
    ConfigStoreError,
    ErrorKind,
    InvalidConfigError,
    OperationCancelled,
    SerializationError,
)
from .guard import OperationGuard
from .notifier import LoggingNotifier, Notifier
from .result import OperationResult
from .serializer import JsonSerializer, Serializer
from .storage import FileStore, LocalFileStore
from .store import ChangeListener, ConfigStore, Validator

__all__ = [
    "ConfigStore",
    "OperationResult",
    "ErrorKind",
    "ConfigStoreError",
    "SerializationError",
    "InvalidConfigError",
    "OperationCancelled",
    "CancellationToken",
    "OperationGuard",
    "Serializer",
    "JsonSerializer",
    "FileStore",
    "LocalFileStore",
    "Notifier",
    "LoggingNotifier",
    "Validator",
    "ChangeListener",
]
