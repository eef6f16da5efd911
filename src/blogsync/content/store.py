"""Local record store for drafts and posts.

Each collection is one JSON array under a fixed storage key. Every
operation is a whole-collection read-modify-write; reads never raise
on malformed data.
"""

from __future__ import annotations

import json
import logging

from blogsync.content.models import CollectionKind, ContentRecord
from blogsync.content.storage import LocalStorage
from blogsync.shared.errors import ParseError

logger = logging.getLogger(__name__)

STORAGE_KEYS: dict[str, str] = {
    CollectionKind.DRAFTS: "portfolio_blog_drafts",
    CollectionKind.POSTS: "portfolio_blog_posts",
}
SETTINGS_KEY = "portfolio_github_settings"


class RecordStore:
    """CRUD over the local drafts and posts collections."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    # ── Private helpers ──────────────────────────────────────────

    def _key(self, kind: CollectionKind | str) -> str:
        return STORAGE_KEYS[CollectionKind(kind)]

    def _save(self, kind: CollectionKind | str, records: list[ContentRecord]) -> None:
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        self._storage.set_item(self._key(kind), payload)

    # ── Read operations ──────────────────────────────────────────

    def get_all(self, kind: CollectionKind | str) -> list[ContentRecord]:
        """Return the collection in persisted order, or [] if absent or corrupt."""
        key = self._key(kind)
        raw = self._storage.get_item(key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt %s collection in local storage, treating as empty", kind)
            return []
        if not isinstance(items, list):
            logger.warning("Local %s collection is not an array, treating as empty", kind)
            return []

        records: list[ContentRecord] = []
        for item in items:
            try:
                records.append(ContentRecord.from_data(item))
            except ParseError:
                logger.warning("Skipping malformed record in local %s collection", kind)
        return records

    def get_by_id(self, kind: CollectionKind | str, record_id: str) -> ContentRecord | None:
        for record in self.get_all(kind):
            if record.id == record_id:
                return record
        return None

    def list_sorted(self, kind: CollectionKind | str) -> list[ContentRecord]:
        """Return the collection newest ``updatedAt`` first."""
        return sorted(self.get_all(kind), key=lambda r: r.updated_at, reverse=True)

    # ── Write operations ─────────────────────────────────────────

    def upsert(self, kind: CollectionKind | str, record: ContentRecord) -> None:
        """Replace the record with the same id in place, or append it."""
        records = self.get_all(kind)
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                break
        else:
            records.append(record)
        self._save(kind, records)

    def remove_by_id(self, kind: CollectionKind | str, record_id: str) -> None:
        records = self.get_all(kind)
        self._save(kind, [r for r in records if r.id != record_id])
