"""Shared fixtures for sync tests: an in-memory repository client."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from blogsync.content.storage import LocalStorage
from blogsync.content.store import RecordStore
from blogsync.shared.errors import NotFoundError, RemoteWriteError, TransportError


class FakeContentClient:
    """Dict-backed stand-in for GitHubContentClient.

    ``fail_put`` maps a path to the exception its next writes raise;
    ``fail_read`` does the same for reads.
    """

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.puts: list[tuple[str, str]] = []
        self.deletes: list[str] = []
        self.fail_put: dict[str, Exception] = {}
        self.fail_read: dict[str, Exception] = {}

    def read_raw(self, path: str) -> str:
        if path in self.fail_read:
            raise self.fail_read[path]
        if path not in self.files:
            raise NotFoundError(path)
        return self.files[path]

    def read_json(self, path: str) -> object | None:
        try:
            text = self.read_raw(path)
        except (NotFoundError, TransportError):
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return None

    def put_file(self, path: str, content: str, message: str) -> dict:
        if path in self.fail_put:
            raise self.fail_put[path]
        self.files[path] = content
        self.puts.append((path, message))
        return {}

    def delete_file(self, path: str, message: str) -> bool:
        self.deletes.append(path)
        return self.files.pop(path, None) is not None

    def json_at(self, path: str) -> object:
        return json.loads(self.files[path])


@pytest.fixture
def fake_client() -> FakeContentClient:
    return FakeContentClient()


@pytest.fixture
def store(tmp_path: Path) -> RecordStore:
    return RecordStore(LocalStorage(tmp_path / "storage.json"))


@pytest.fixture
def write_error() -> RemoteWriteError:
    return RemoteWriteError("PUT failed: 500", status=500)
