from __future__ import annotations

import logging
import os
from pathlib import Path

from ..defaults import LOG_LEVEL_ENV


def setup_logging(log_dir: Path | None = None, level: str | int | None = None) -> None:
    """Configure console (and optionally file) logging once."""

    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / "jsonconfig.log", mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
