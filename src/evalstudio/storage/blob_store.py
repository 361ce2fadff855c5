"""Opaque key-value blob stores holding JSON-serialized collections.

The stores above this layer only ever read and write whole collections
under a handful of logical keys, so the contract is just get/set of text.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class BlobStore(ABC):
    """Abstract text blob store keyed by string."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the text stored under *key*, or None if absent."""

    @abstractmethod
    def set(self, key: str, text: str) -> None:
        """Replace the text stored under *key*."""


class MemoryBlobStore(BlobStore):
    """Dict-backed store, for tests and embedding."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, text: str) -> None:
        self._data[key] = text


class JsonFileBlobStore(BlobStore):
    """Persist each key as ``{key}.json`` under a storage directory.

    File layout:
        .evalstudio/
            datasets.json
            evaluation_runs.json
            online_configs.json

    Writes are atomic (write to .tmp, then rename) to prevent partial files.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, text: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)
