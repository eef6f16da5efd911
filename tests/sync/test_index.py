"""Tests for IndexMaintainer: remote per-collection index files."""

import threading

import pytest
from blogsync.content.models import IndexEntry
from blogsync.shared.errors import RemoteWriteError
from blogsync.sync.index import IndexMaintainer, index_path, sort_entries


def _entry(entry_id: str, updated_at: int | None = None, title: str = "") -> IndexEntry:
    return IndexEntry(id=entry_id, title=title, updated_at=updated_at, created_at=1)


class TestIndexPath:
    def test_per_kind(self):
        assert index_path("drafts") == "drafts/index.json"
        assert index_path("posts") == "posts/index.json"


class TestSortEntries:
    def test_missing_updated_at_sorts_oldest(self):
        entries = [_entry("none"), _entry("new", 5), _entry("old", 1)]
        assert [e.id for e in sort_entries(entries)] == ["new", "old", "none"]


class TestReadIndex:
    def test_absent_is_empty(self, fake_client):
        assert IndexMaintainer(fake_client).read_index("posts") == []

    def test_unparseable_is_empty(self, fake_client):
        fake_client.files["posts/index.json"] = "{{nope"
        assert IndexMaintainer(fake_client).read_index("posts") == []

    def test_non_array_is_empty(self, fake_client):
        fake_client.files["posts/index.json"] = '{"id": "x"}'
        assert IndexMaintainer(fake_client).read_index("posts") == []

    def test_skips_malformed_entries(self, fake_client):
        fake_client.files["drafts/index.json"] = '[{"id": "a"}, {"title": "no id"}]'
        assert [e.id for e in IndexMaintainer(fake_client).read_index("drafts")] == ["a"]


class TestUpsertEntry:
    def test_orders_newest_first(self, fake_client):
        maintainer = IndexMaintainer(fake_client)
        maintainer.upsert_entry("posts", _entry("a", 100))
        maintainer.upsert_entry("posts", _entry("b", 300))
        maintainer.upsert_entry("posts", _entry("c", 200))

        stored = fake_client.json_at("posts/index.json")
        assert [e["updatedAt"] for e in stored] == [300, 200, 100]

    def test_replaces_existing_id(self, fake_client):
        maintainer = IndexMaintainer(fake_client)
        maintainer.upsert_entry("drafts", _entry("a", 100, title="First"))
        maintainer.upsert_entry("drafts", _entry("b", 150))
        maintainer.upsert_entry("drafts", _entry("a", 200, title="Second"))

        stored = fake_client.json_at("drafts/index.json")
        assert [e["id"] for e in stored] == ["a", "b"]
        assert stored[0]["title"] == "Second"

    def test_treats_corrupt_index_as_empty(self, fake_client):
        fake_client.files["posts/index.json"] = "not json"
        IndexMaintainer(fake_client).upsert_entry("posts", _entry("a", 1))
        assert [e["id"] for e in fake_client.json_at("posts/index.json")] == ["a"]

    def test_commit_message_names_kind_and_id(self, fake_client):
        IndexMaintainer(fake_client).upsert_entry("posts", _entry("p_9", 1))
        assert fake_client.puts[-1] == ("posts/index.json", "chore: update posts index (p_9)")

    def test_written_with_two_space_indent(self, fake_client):
        IndexMaintainer(fake_client).upsert_entry("posts", _entry("p_9", 1))
        assert fake_client.files["posts/index.json"].startswith('[\n  {\n    "id": "p_9"')

    def test_kinds_are_independent(self, fake_client):
        maintainer = IndexMaintainer(fake_client)
        maintainer.upsert_entry("drafts", _entry("d", 1))
        maintainer.upsert_entry("posts", _entry("p", 1))
        assert [e.id for e in maintainer.read_index("drafts")] == ["d"]
        assert [e.id for e in maintainer.read_index("posts")] == ["p"]

    def test_write_failure_propagates(self, fake_client, write_error):
        fake_client.fail_put["posts/index.json"] = write_error
        with pytest.raises(RemoteWriteError):
            IndexMaintainer(fake_client).upsert_entry("posts", _entry("a", 1))

    def test_concurrent_updates_keep_every_entry(self, fake_client):
        maintainer = IndexMaintainer(fake_client)
        threads = [
            threading.Thread(target=maintainer.upsert_entry, args=("posts", _entry(f"id{i}", i)))
            for i in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(maintainer.read_index("posts")) == 20


class TestRemoveEntry:
    def test_removes(self, fake_client):
        maintainer = IndexMaintainer(fake_client)
        maintainer.upsert_entry("drafts", _entry("a", 1))
        maintainer.upsert_entry("drafts", _entry("b", 2))
        assert maintainer.remove_entry("drafts", "a") is True
        assert [e.id for e in maintainer.read_index("drafts")] == ["b"]

    def test_missing_is_noop(self, fake_client):
        maintainer = IndexMaintainer(fake_client)
        assert maintainer.remove_entry("drafts", "a") is False
        assert fake_client.puts == []
