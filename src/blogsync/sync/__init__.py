"""Sync domain: backend selection, remote index maintenance and orchestration."""

from blogsync.sync.index import IndexMaintainer, index_path
from blogsync.sync.orchestrator import (
    Backend,
    LocalBackend,
    RemoteBackend,
    RemoteStatus,
    Resolution,
    ResolveSource,
    SaveResult,
    SyncOrchestrator,
    select_backend,
)

__all__ = [
    "Backend",
    "IndexMaintainer",
    "LocalBackend",
    "RemoteBackend",
    "RemoteStatus",
    "Resolution",
    "ResolveSource",
    "SaveResult",
    "SyncOrchestrator",
    "index_path",
    "select_backend",
]
