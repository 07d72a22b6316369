from __future__ import annotations

from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    """String-keyed document storage holding raw JSON text."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        """Create a process-local store, optionally pre-populated."""
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        """Return the stored text for ``key`` if present."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""
        self._values[key] = value

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        self._values.pop(key, None)


class JsonFileStore:
    """One ``<key>.json`` file per key inside a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir

    @property
    def data_dir(self) -> Path:
        """Return the directory holding the stored documents."""
        return self._data_dir

    def get(self, key: str) -> str | None:
        """Read the document for ``key``, or None when never written."""
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write the document atomically via a sibling temp file."""
        self._data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def delete(self, key: str) -> None:
        """Remove the document for ``key`` if it exists."""
        self._path_for(key).unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"
