"""Error taxonomy for local and remote persistence.

Read paths treat ``NotFoundError`` as absence. ``ParseError`` marks a
record that could not be decoded; callers fall back or skip it.
Write paths raise ``RemoteWriteError`` (or one of its subclasses) to
the caller, which decides whether to retry or warn.
"""

from __future__ import annotations

from typing import Any


class BlogSyncError(Exception):
    """Base class for all blogsync errors."""


class NotFoundError(BlogSyncError):
    """A remote path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not found: {path}")
        self.path = path


class TransportError(BlogSyncError):
    """A read failed on the network or with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RemoteWriteError(BlogSyncError):
    """A required remote write did not succeed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ConflictError(RemoteWriteError):
    """The version token was missing or stale for an existing path."""


class PartialSyncError(RemoteWriteError):
    """The content file was written but the index update failed.

    Carries what is needed to retry only the index phase.
    """

    def __init__(self, kind: str, record: Any, cause: BaseException) -> None:
        super().__init__(f"Saved {kind}/{record.id}.json but the {kind} index update failed: {cause}")
        self.kind = kind
        self.record = record
        self.cause = cause


class ContentValidationError(BlogSyncError):
    """A record is missing a title or content at publish time."""


class ParseError(BlogSyncError):
    """Stored or remote JSON could not be parsed."""
