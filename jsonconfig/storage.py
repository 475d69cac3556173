from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .defaults import FILE_ENCODING, TEMP_SUFFIX


class FileStore(Protocol):
    """File-system operations required by ConfigStore. All may raise OSError."""

    def exists(self, path: Path) -> bool:
        ...

    def read_text(self, path: Path) -> str:
        ...

    def write_text(self, path: Path, text: str) -> None:
        ...

    def delete(self, path: Path) -> None:
        ...

    def ensure_parent_dir(self, path: Path) -> None:
        ...


class LocalFileStore:
    """Local-disk file store with atomic replace-on-write."""

    def __init__(self, encoding: str = FILE_ENCODING) -> None:
        self._encoding = encoding

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding=self._encoding)

    def write_text(self, path: Path, text: str) -> None:
        tmp_path = path.with_name(path.name + TEMP_SUFFIX)
        try:
            tmp_path.write_text(text, encoding=self._encoding)
            tmp_path.replace(path)
        finally:
            # Only left behind when the replace failed.
            if tmp_path.exists():
                tmp_path.unlink()

    def delete(self, path: Path) -> None:
        path.unlink(missing_ok=True)

    def ensure_parent_dir(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
