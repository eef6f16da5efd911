"""Content domain: record models, helpers and the local record store."""

from blogsync.content.helpers import derive_excerpt, generate_id, strip_markup
from blogsync.content.models import CollectionKind, ContentRecord, IndexEntry
from blogsync.content.storage import LocalStorage
from blogsync.content.store import RecordStore

__all__ = [
    "CollectionKind",
    "ContentRecord",
    "IndexEntry",
    "LocalStorage",
    "RecordStore",
    "derive_excerpt",
    "generate_id",
    "strip_markup",
]
