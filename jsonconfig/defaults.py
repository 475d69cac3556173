"""
Package-wide defaults.

Central place for the constants shared by the store and its adapters.
"""

from __future__ import annotations

from typing import Final

# Encoding used for every config file read and write.
FILE_ENCODING: Final[str] = "utf-8"

# Config files are pretty-printed so they stay hand-editable.
JSON_INDENT: Final[int] = 2

# Suffix appended to the sibling file used for atomic writes.
TEMP_SUFFIX: Final[str] = ".tmp"

# How often (seconds) an async waiter re-checks its cancel token while the
# guard is held by someone else.
GUARD_POLL_SECONDS: Final[float] = 0.05

# Logger used by the default notifier.
LOGGER_NAME: Final[str] = "jsonconfig"

# Environment variable consulted by setup_logging() for the default level.
LOG_LEVEL_ENV: Final[str] = "JSONCONFIG_LOG_LEVEL"
