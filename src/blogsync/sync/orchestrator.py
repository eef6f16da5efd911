"""Backend selection and save/publish/resolve sequencing.

The backend is chosen once, when the orchestrator is built: either the
local record store or a remote GitHub repository. Remote saves are a
two-phase operation (content file, then index). A failure in the first
phase leaves nothing written; a failure in the second raises
PartialSyncError so the caller can retry just the index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from blogsync.content.helpers import strip_markup
from blogsync.content.models import CollectionKind, ContentRecord, IndexEntry
from blogsync.content.store import RecordStore
from blogsync.integrations.github import DEFAULT_TIMEOUT, GitHubConfig, GitHubContentClient
from blogsync.shared.errors import (
    ContentValidationError,
    NotFoundError,
    ParseError,
    PartialSyncError,
    RemoteWriteError,
    TransportError,
)
from blogsync.sync.index import ContentClient, IndexMaintainer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalBackend:
    """Persist to local storage only."""


@dataclass(frozen=True)
class RemoteBackend:
    """Persist to the configured GitHub repository."""

    config: GitHubConfig


Backend = LocalBackend | RemoteBackend


def select_backend(config: GitHubConfig | None) -> Backend:
    """Remote when all four settings are present, local otherwise."""
    if config is not None and config.is_configured:
        return RemoteBackend(config)
    return LocalBackend()


class ResolveSource(StrEnum):
    REMOTE = "remote"
    LOCAL = "local"
    NONE = "none"


class RemoteStatus(StrEnum):
    """What the remote lookup established during a resolve."""

    SKIPPED = "skipped"
    FOUND = "found"
    ABSENT = "absent"
    UNAVAILABLE = "unavailable"


@dataclass
class SaveResult:
    kind: CollectionKind
    record: ContentRecord
    remote: bool
    index: list[IndexEntry] | None = None


@dataclass
class Resolution:
    """Outcome of a detailed resolve.

    ``remote_status`` separates a confirmed remote absence from a remote
    that could not be read (network error, bad status, corrupt file).
    """

    record: ContentRecord | None
    source: ResolveSource
    remote_status: RemoteStatus

    @property
    def found(self) -> bool:
        return self.record is not None


def content_path(kind: CollectionKind | str, record_id: str) -> str:
    return f"{CollectionKind(kind).value}/{record_id}.json"


def commit_message(kind: CollectionKind | str, record_id: str) -> str:
    if CollectionKind(kind) == CollectionKind.POSTS:
        return f"feat: publish post ({record_id})"
    return f"chore: save draft ({record_id})"


def validate_for_publish(record: ContentRecord) -> None:
    """Raise ContentValidationError unless title and text content are present."""
    if not record.title.strip():
        raise ContentValidationError("A post needs a title before it can be published")
    if not strip_markup(record.content).strip():
        raise ContentValidationError("A post needs some content before it can be published")


class SyncOrchestrator:
    """Routes saves, publishes and reads to the selected backend."""

    def __init__(
        self,
        store: RecordStore,
        backend: Backend | None = None,
        client: ContentClient | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self.store = store
        self.backend: Backend = backend if backend is not None else LocalBackend()
        self._client: ContentClient | None = None
        self._index: IndexMaintainer | None = None

        if isinstance(self.backend, RemoteBackend):
            if not self.backend.config.is_configured:
                raise ValueError("RemoteBackend requires owner, repo, branch and token")
            self._client = client or GitHubContentClient(self.backend.config, timeout=timeout)
            self._index = IndexMaintainer(self._client)

    @property
    def is_remote(self) -> bool:
        return isinstance(self.backend, RemoteBackend)

    @property
    def mode_label(self) -> str:
        if self.is_remote:
            return "GitHub (publishing enabled)"
        return "Local storage"

    # ── Writes ───────────────────────────────────────────────────

    def save(self, kind: CollectionKind | str, record: ContentRecord) -> SaveResult:
        """Persist ``record`` into ``kind`` on the selected backend.

        Raises:
            RemoteWriteError: The content file could not be written (remote only).
            PartialSyncError: The content file was written but the index was not.
        """
        kind = CollectionKind(kind)
        record = self._keep_created_at(kind, record)
        if self._client is None:
            self.store.upsert(kind, record)
            logger.info("Saved %s/%s locally", kind, record.id)
            return SaveResult(kind=kind, record=record, remote=False)

        self._client.put_file(
            content_path(kind, record.id),
            record.to_json(),
            commit_message(kind, record.id),
        )
        index = self._update_index(kind, record)
        return SaveResult(kind=kind, record=record, remote=True, index=index)

    def _stored_copy(self, kind: CollectionKind, record_id: str) -> ContentRecord | None:
        if self._client is None:
            return self.store.get_by_id(kind, record_id)
        path = content_path(kind, record_id)
        try:
            return ContentRecord.from_json(self._client.read_raw(path))
        except NotFoundError:
            return None
        except (TransportError, ParseError) as exc:
            logger.debug("Could not read existing %s: %s", path, exc)
            return None

    def _keep_created_at(self, kind: CollectionKind, record: ContentRecord) -> ContentRecord:
        """Carry over ``createdAt`` from an earlier save of the same id.

        A post being published also checks the draft it came from.
        """
        kinds = [kind, CollectionKind.DRAFTS] if kind == CollectionKind.POSTS else [kind]
        for candidate in kinds:
            stored = self._stored_copy(candidate, record.id)
            if stored is not None and stored.created_at:
                if stored.created_at == record.created_at:
                    return record
                return record.model_copy(update={"created_at": stored.created_at})
        return record

    def _require_index(self) -> IndexMaintainer:
        if self._index is None:
            raise ValueError("Index operations are only available in remote mode")
        return self._index

    def _update_index(self, kind: CollectionKind, record: ContentRecord) -> list[IndexEntry]:
        index = self._require_index()
        try:
            return index.upsert_entry(kind, record.to_index_entry())
        except RemoteWriteError as exc:
            logger.warning("Index update for %s/%s failed after content write", kind, record.id)
            raise PartialSyncError(kind.value, record, exc) from exc

    def retry_index(self, kind: CollectionKind | str, record: ContentRecord) -> list[IndexEntry]:
        """Re-run only the index phase after a PartialSyncError."""
        return self._update_index(CollectionKind(kind), record)

    def publish(self, record: ContentRecord) -> SaveResult:
        """Validate, save into posts, then drop the draft with the same id.

        The local draft is always removed. In remote mode the remote draft
        file and its index entry are removed too; failures there are logged
        and leave the publish in place.

        Raises:
            ContentValidationError: Title or content is missing; nothing is written.
        """
        validate_for_publish(record)
        result = self.save(CollectionKind.POSTS, record)
        self.store.remove_by_id(CollectionKind.DRAFTS, record.id)
        if self._client is not None:
            self._remove_remote_draft(record.id)
        return result

    def _remove_remote_draft(self, record_id: str) -> None:
        path = content_path(CollectionKind.DRAFTS, record_id)
        try:
            self._client.delete_file(path, f"chore: remove published draft ({record_id})")
            self._require_index().remove_entry(CollectionKind.DRAFTS, record_id)
        except (RemoteWriteError, TransportError) as exc:
            logger.warning("Published %s but could not remove its remote draft: %s", record_id, exc)

    def delete(self, kind: CollectionKind | str, record_id: str) -> None:
        """Remove a record outright from ``kind``.

        Local storage is always cleaned; in remote mode the content file
        and its index entry are removed as well.
        """
        kind = CollectionKind(kind)
        self.store.remove_by_id(kind, record_id)
        if self._client is None:
            return
        self._client.delete_file(content_path(kind, record_id), f"chore: delete {kind} ({record_id})")
        self._require_index().remove_entry(kind, record_id)

    # ── Reads ────────────────────────────────────────────────────

    def resolve(self, record_id: str) -> ContentRecord | None:
        """Find a published post, preferring the remote copy when configured."""
        return self.resolve_detailed(record_id).record

    def resolve_detailed(self, record_id: str) -> Resolution:
        status = RemoteStatus.SKIPPED
        if self._client is not None:
            path = content_path(CollectionKind.POSTS, record_id)
            try:
                record = ContentRecord.from_json(self._client.read_raw(path))
                return Resolution(record, ResolveSource.REMOTE, RemoteStatus.FOUND)
            except NotFoundError:
                status = RemoteStatus.ABSENT
            except TransportError as exc:
                logger.warning("Remote lookup of %s failed, falling back to local: %s", path, exc)
                status = RemoteStatus.UNAVAILABLE
            except ParseError as exc:
                logger.warning("Remote %s is not a valid record, falling back to local: %s", path, exc)
                status = RemoteStatus.UNAVAILABLE

        local = self.store.get_by_id(CollectionKind.POSTS, record_id)
        if local is not None:
            return Resolution(local, ResolveSource.LOCAL, status)
        return Resolution(None, ResolveSource.NONE, status)

    def list_entries(self, kind: CollectionKind | str) -> list[IndexEntry]:
        """List ``kind`` newest first: the remote index, or the local collection."""
        kind = CollectionKind(kind)
        if self._index is not None:
            return self._index.read_index(kind)
        return [r.to_index_entry() for r in self.store.list_sorted(kind)]
