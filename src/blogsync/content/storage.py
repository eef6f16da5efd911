"""File-backed key-value storage with string values.

Mirrors the browser's ``localStorage``: every key maps to a string,
usually JSON text. The whole map lives in one JSON file that is
re-read on every access and replaced atomically on every write.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_FILENAME = ".blogsync-storage.json"


class LocalStorage:
    """Synchronous key-value storage persisted to a single JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError):
            logger.warning("Corrupt storage file at %s, treating as empty", self._path)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Storage file at %s is not an object, treating as empty", self._path)
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=self._path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)

    def keys(self) -> list[str]:
        return list(self._load().keys())
