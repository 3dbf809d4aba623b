"""Key-value storage backends for save and settings records.

The save store only needs get/put/has of whole string values.
``FileStorage`` keeps one ``<key>.json`` file per record under a directory;
``MemoryStorage`` keeps them in a dict (tests, headless simulations).
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

SAVE_DIR = Path.home() / ".autoinvaders"


class StorageError(OSError):
    """A record could not be read or written."""


class Storage(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...

    def has(self, key: str) -> bool: ...


class FileStorage:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: Path | str = SAVE_DIR) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"could not read {path}: {e}") from e

    def put(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Readers only ever see a complete file
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"could not write {path}: {e}") from e

    def has(self, key: str) -> bool:
        return self._path(key).exists()


class MemoryStorage:
    """Dict-backed storage."""

    def __init__(self, records: dict[str, str] | None = None) -> None:
        self.records: dict[str, str] = dict(records or {})

    def get(self, key: str) -> str | None:
        return self.records.get(key)

    def put(self, key: str, value: str) -> None:
        self.records[key] = value

    def has(self, key: str) -> bool:
        return key in self.records
