"""Key-value backends for the durable term store.

The glossary persists exactly one record: the whole term collection, as a
JSON string, under a fixed key. A backend only has to get and set strings.

- `MemoryStore`: dict-backed; for tests and throwaway sessions.
- `FileStore`  : one `<key>.json` file per key under a base directory.
  Default directory: `CRASCAD_DATA_DIR` setting or `artifacts/store/`.

Backends let `OSError` and `UnicodeEncodeError` propagate; `TermPersistence`
decides how failures surface.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Protocol

from crascad.core.settings import load_settings


class KeyValueStore(Protocol):
    """Opaque string store keyed by a fixed identifier."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key was never written."""
        ...

    def set(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""
        ...


class MemoryStore:
    """Volatile store; contents live as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


def _default_dir() -> Path:
    """Return the configured base directory for stored records."""
    return load_settings().data_dir


class FileStore:
    """Persist each key as a UTF-8 JSON file on disk."""

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir: Path = base_dir if base_dir is not None else _default_dir()

    def path_for(self, key: str) -> Path:
        """Return the file path backing ``key``."""
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Replace the file for ``key`` atomically.

        The value is encoded before anything touches the disk, then written to a
        sibling temp file that is moved over the target, so a failed write leaves
        the previous record intact.
        """
        data = (value + "\n").encode("utf-8")
        self.base_dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_dir, prefix=f".{key}.", suffix=".tmp")
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, target)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise


__all__ = ["FileStore", "KeyValueStore", "MemoryStore"]
