"""Remote per-collection index maintenance.

``{kind}/index.json`` holds a JSON array of IndexEntry objects, newest
``updatedAt`` first. Every update is a full read-modify-write of the
file, serialized per kind within this process.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Protocol

from pydantic import ValidationError

from blogsync.content.models import CollectionKind, IndexEntry

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"


class ContentClient(Protocol):
    """The subset of GitHubContentClient the sync layer relies on."""

    def read_raw(self, path: str) -> str: ...

    def read_json(self, path: str) -> object | None: ...

    def put_file(self, path: str, content: str, message: str) -> dict: ...

    def delete_file(self, path: str, message: str) -> bool: ...


def index_path(kind: CollectionKind | str) -> str:
    return f"{CollectionKind(kind).value}/{INDEX_FILENAME}"


def sort_entries(entries: list[IndexEntry]) -> list[IndexEntry]:
    """Newest first; entries without ``updatedAt`` sort as oldest."""
    return sorted(entries, key=lambda e: e.updated_at or 0, reverse=True)


class IndexMaintainer:
    """Keeps the remote drafts and posts indexes in step with content writes."""

    def __init__(self, client: ContentClient) -> None:
        self._client = client
        self._locks = {kind: threading.Lock() for kind in CollectionKind}

    def read_index(self, kind: CollectionKind | str) -> list[IndexEntry]:
        """Return the current index; absent or unparseable reads as []."""
        data = self._client.read_json(index_path(kind))
        if not isinstance(data, list):
            if data is not None:
                logger.warning("Remote %s is not an array, treating as empty", index_path(kind))
            return []
        entries: list[IndexEntry] = []
        for item in data:
            try:
                entries.append(IndexEntry.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed entry in %s", index_path(kind))
        return entries

    def _write(self, kind: CollectionKind, entries: list[IndexEntry], message: str) -> None:
        body = json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False)
        self._client.put_file(index_path(kind), body, message)

    def upsert_entry(self, kind: CollectionKind | str, entry: IndexEntry) -> list[IndexEntry]:
        """Replace or add ``entry`` and write the re-sorted index back."""
        kind = CollectionKind(kind)
        with self._locks[kind]:
            entries = [e for e in self.read_index(kind) if e.id != entry.id]
            entries.append(entry)
            entries = sort_entries(entries)
            self._write(kind, entries, f"chore: update {kind} index ({entry.id})")
        logger.info("Updated %s index with %s (%d entries)", kind, entry.id, len(entries))
        return entries

    def remove_entry(self, kind: CollectionKind | str, record_id: str) -> bool:
        """Drop ``record_id`` from the index; returns False if it was not listed."""
        kind = CollectionKind(kind)
        with self._locks[kind]:
            entries = self.read_index(kind)
            remaining = [e for e in entries if e.id != record_id]
            if len(remaining) == len(entries):
                return False
            self._write(kind, remaining, f"chore: remove {record_id} from {kind} index")
        return True
