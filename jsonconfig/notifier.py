from __future__ import annotations

import logging
from typing import Optional, Protocol

from .defaults import LOGGER_NAME


class Notifier(Protocol):
    """Best-effort diagnostics sink. Implementations must not raise."""

    def warn(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Forward store diagnostics to a standard-library logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    def warn(self, message: str) -> None:
        self._logger.warning("%s", message)

    def error(self, message: str) -> None:
        self._logger.error("%s", message)
