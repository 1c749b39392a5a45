"""Tests for the in-memory DocumentStore and its live queries.

Run with: pytest tests/test_memory_store.py -v
"""

import pytest

from events.stores.interfaces import DocumentNotFoundError, VersionConflictError
from events.stores.memory_store import InMemoryDocumentStore

COLLECTION = "artifacts/test/public/data/events"


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


class TestWrites:
    def test_put_creates_then_replaces_with_new_version(self, memory_store):
        """put creates a document and replaces it with a new version."""
        first = memory_store.put(COLLECTION, "a", {"title": "one", "extra": 1})
        second = memory_store.put(COLLECTION, "a", {"title": "two"})

        assert first.version == 1
        assert second.version == 2
        assert memory_store.get(COLLECTION, "a").fields == {"title": "two"}

    def test_add_assigns_unique_keys(self, memory_store):
        """add generates a distinct key per document."""
        first = memory_store.add(COLLECTION, {"n": 1})
        second = memory_store.add(COLLECTION, {"n": 2})
        assert first.key != second.key

    def test_update_merges_fields(self, memory_store):
        """update merges new fields into the document."""
        memory_store.put(COLLECTION, "a", {"title": "one", "capacity": 3})
        updated = memory_store.update(COLLECTION, "a", {"capacity": 5})
        assert updated.fields == {"title": "one", "capacity": 5}
        assert updated.version == 2

    def test_update_missing_document_raises(self, memory_store):
        """update raises DocumentNotFoundError for an unknown key."""
        with pytest.raises(DocumentNotFoundError):
            memory_store.update(COLLECTION, "missing", {"x": 1})

    def test_update_with_stale_version_raises_and_keeps_document(self, memory_store):
        """A stale expected version raises and leaves the document as is."""
        memory_store.put(COLLECTION, "a", {"attendees": []})
        memory_store.update(COLLECTION, "a", {"attendees": ["x"]})

        with pytest.raises(VersionConflictError) as excinfo:
            memory_store.update(COLLECTION, "a", {"attendees": ["y"]}, expected_version=1)

        assert excinfo.value.actual == 2
        assert memory_store.get(COLLECTION, "a").fields == {"attendees": ["x"]}

    def test_delete_is_idempotent(self, memory_store):
        """Deleting a missing document is not an error."""
        memory_store.put(COLLECTION, "a", {})
        memory_store.delete(COLLECTION, "a")
        memory_store.delete(COLLECTION, "a")
        assert memory_store.get(COLLECTION, "a") is None

    def test_returned_documents_do_not_alias_stored_state(self, memory_store):
        """Mutating a returned document does not change the store."""
        memory_store.put(COLLECTION, "a", {"attendees": ["x"]})
        memory_store.get(COLLECTION, "a").fields["attendees"].append("y")
        assert memory_store.get(COLLECTION, "a").fields == {"attendees": ["x"]}

    def test_fetch_keeps_insertion_order_and_applies_predicate(self, memory_store):
        """fetch keeps insertion order and honours the predicate."""
        for key, n in [("a", 1), ("b", 2), ("c", 3)]:
            memory_store.put(COLLECTION, key, {"n": n})
        odd = memory_store.fetch(COLLECTION, lambda doc: doc.fields["n"] % 2 == 1)
        assert [doc.key for doc in memory_store.fetch(COLLECTION)] == ["a", "b", "c"]
        assert [doc.key for doc in odd] == ["a", "c"]


class TestLiveQuery:
    def test_subscribe_delivers_current_snapshot(self, memory_store):
        """Subscribing delivers the current snapshot immediately."""
        memory_store.put(COLLECTION, "a", {"n": 1})
        snapshots = []
        memory_store.query(COLLECTION).subscribe(snapshots.append)
        assert [[doc.key for doc in snap] for snap in snapshots] == [["a"]]

    def test_every_write_pushes_a_fresh_snapshot(self, memory_store):
        """Each write pushes a new snapshot to subscribers."""
        snapshots = []
        memory_store.query(COLLECTION).subscribe(snapshots.append)

        memory_store.put(COLLECTION, "a", {"n": 1})
        memory_store.update(COLLECTION, "a", {"n": 2})
        memory_store.delete(COLLECTION, "a")

        assert [len(snap) for snap in snapshots] == [0, 1, 1, 0]
        assert snapshots[2][0].fields == {"n": 2}

    def test_other_collections_do_not_notify(self, memory_store):
        """Writes to other collections do not notify the subscriber."""
        snapshots = []
        memory_store.query(COLLECTION).subscribe(snapshots.append)
        memory_store.put("artifacts/test/users/u1/registrations", "a", {})
        assert len(snapshots) == 1

    def test_unsubscribe_stops_delivery_and_is_idempotent(self, memory_store):
        """Unsubscribe stops delivery and can be called twice."""
        snapshots = []
        subscription = memory_store.query(COLLECTION).subscribe(snapshots.append)

        subscription.unsubscribe()
        subscription.unsubscribe()
        memory_store.put(COLLECTION, "a", {})

        assert len(snapshots) == 1
        assert not subscription.active
        assert memory_store.subscriber_count(COLLECTION) == 0

    def test_failing_listener_does_not_block_others(self, memory_store, caplog):
        """A failing listener is logged and other listeners still run."""
        def broken(snapshot):
            raise RuntimeError("boom")

        snapshots = []
        memory_store.query(COLLECTION).subscribe(broken)
        memory_store.query(COLLECTION).subscribe(snapshots.append)

        memory_store.put(COLLECTION, "a", {})

        assert len(snapshots) == 2
        assert "Change listener failed" in caplog.text

    def test_predicate_filters_snapshots(self, memory_store):
        """Snapshots only contain documents matching the predicate."""
        snapshots = []
        memory_store.query(
            COLLECTION, lambda doc: doc.fields.get("status") == "approved"
        ).subscribe(snapshots.append)

        memory_store.put(COLLECTION, "a", {"status": "pending"})
        memory_store.put(COLLECTION, "b", {"status": "approved"})

        assert [[doc.key for doc in snap] for snap in snapshots] == [[], [], ["b"]]
