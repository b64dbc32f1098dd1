"""Tests for the in-memory object store."""

from __future__ import annotations

import pytest

from source_operator.constants import KIND_CLAIM, KIND_SOURCE, KIND_VOLUME
from source_operator.exceptions import Cancelled, Conflict, NotFound
from source_operator.services.store.memory import MemoryStore
from source_operator.utils.context import Cancellation, reconcile_scope


class TestMemoryStore:
    """Test cases for MemoryStore."""

    def test_create_assigns_identity(self, store):
        """Test that uid and resourceVersion are assigned on create."""
        created = store.create(KIND_CLAIM, {"metadata": {"name": "c", "namespace": "default"}})

        assert created["metadata"]["uid"]
        assert created["metadata"]["resourceVersion"]
        assert store.get(KIND_CLAIM, "default", "c") == created

    def test_create_existing_conflicts(self, store):
        """Test that creating an existing object raises Conflict."""
        store.create(KIND_CLAIM, {"metadata": {"name": "c", "namespace": "default"}})

        with pytest.raises(Conflict):
            store.create(KIND_CLAIM, {"metadata": {"name": "c", "namespace": "default"}})

    def test_get_missing(self, store):
        """Test that a missing object raises NotFound."""
        with pytest.raises(NotFound, match="PersistentVolumeClaim default/c not found"):
            store.get(KIND_CLAIM, "default", "c")
        assert store.find(KIND_CLAIM, "default", "c") is None

    def test_cluster_scoped_ignores_namespace(self, store):
        """Test that volumes are keyed by name only."""
        store.create(KIND_VOLUME, {"metadata": {"name": "v"}})

        assert store.get(KIND_VOLUME, "any-namespace", "v")["metadata"]["name"] == "v"

    def test_returns_copies(self, store):
        """Test that callers cannot mutate stored state."""
        store.create(KIND_VOLUME, {"metadata": {"name": "v"}, "spec": {}})
        obj = store.get(KIND_VOLUME, None, "v")
        obj["spec"]["storageClassName"] = "changed"

        assert "storageClassName" not in store.get(KIND_VOLUME, None, "v")["spec"]

    def test_replace_with_current_version(self, store):
        """Test a replace carrying the current resourceVersion succeeds."""
        created = store.create(KIND_VOLUME, {"metadata": {"name": "v"}, "spec": {}})
        created["spec"]["storageClassName"] = "rclone"

        replaced = store.replace(KIND_VOLUME, created)

        assert replaced["spec"]["storageClassName"] == "rclone"
        assert replaced["metadata"]["resourceVersion"] != created["metadata"]["resourceVersion"]

    def test_replace_with_stale_version_conflicts(self, store):
        """Test a replace carrying an old resourceVersion raises Conflict."""
        created = store.create(KIND_VOLUME, {"metadata": {"name": "v"}, "spec": {}})
        store.replace(KIND_VOLUME, created)

        with pytest.raises(Conflict):
            store.replace(KIND_VOLUME, created)

    def test_replace_does_not_write_status(self, store):
        """Test that status is only changed through update_status."""
        created = store.create(KIND_SOURCE, {"metadata": {"name": "s", "namespace": "default"}})
        created["status"] = {"error": "x"}

        replaced = store.replace(KIND_SOURCE, created)

        assert "status" not in replaced

    def test_update_status_merges(self, store):
        """Test that update_status merges into the status sub-resource."""
        store.create(KIND_SOURCE, {"metadata": {"name": "s", "namespace": "default"}, "spec": {"a": 1}})

        store.update_status(KIND_SOURCE, "default", "s", {"error": "boom"})
        updated = store.update_status(KIND_SOURCE, "default", "s", {"observedGeneration": 1})

        assert updated["status"] == {"error": "boom", "observedGeneration": 1}
        assert updated["spec"] == {"a": 1}

    def test_update_status_missing(self, store):
        """Test that updating the status of a missing object raises NotFound."""
        with pytest.raises(NotFound):
            store.update_status(KIND_SOURCE, "default", "s", {"error": ""})

    def test_delete_collects_owned_objects(self, store):
        """Test that deleting an owner removes its dependents but not unowned objects."""
        owner = store.create(KIND_SOURCE, {"metadata": {"name": "s", "namespace": "default"}})
        owner_ref = {"kind": "Source", "name": "s", "uid": owner["metadata"]["uid"], "controller": True}
        store.create(KIND_CLAIM, {"metadata": {"name": "s", "namespace": "default", "ownerReferences": [owner_ref]}})
        store.create(KIND_VOLUME, {"metadata": {"name": "s", "labels": {"source-name": "s"}}})

        store.delete(KIND_SOURCE, "default", "s")

        assert store.find(KIND_CLAIM, "default", "s") is None
        assert store.find(KIND_VOLUME, None, "s") is not None

    def test_delete_missing(self, store):
        """Test that deleting a missing object raises NotFound."""
        with pytest.raises(NotFound):
            store.delete(KIND_VOLUME, None, "v")

    def test_list(self, store):
        """Test listing objects of one kind."""
        store.create(KIND_VOLUME, {"metadata": {"name": "a"}})
        store.create(KIND_VOLUME, {"metadata": {"name": "b"}})
        store.create(KIND_CLAIM, {"metadata": {"name": "a", "namespace": "default"}})

        assert sorted(obj["metadata"]["name"] for obj in store.list(KIND_VOLUME)) == ["a", "b"]

    def test_honors_cancellation(self):
        """Test that store calls abort once the cycle is cancelled."""
        store = MemoryStore()
        cancellation = Cancellation()
        cancellation.cancel()

        with reconcile_scope(cancellation):
            with pytest.raises(Cancelled):
                store.get(KIND_VOLUME, None, "v")


class TestAnnotate:
    """Test cases for MemoryStore.annotate."""

    def test_merges_annotations(self, store, source):
        store.annotate(KIND_SOURCE, "default", source["metadata"]["name"], {"a": "1"})
        updated = store.annotate(KIND_SOURCE, "default", source["metadata"]["name"], {"b": "2"})

        assert updated["metadata"]["annotations"] == {"a": "1", "b": "2"}
        assert updated["metadata"]["resourceVersion"] != source["metadata"]["resourceVersion"]

    def test_unchanged_annotations_keep_version(self, store, source):
        first = store.annotate(KIND_SOURCE, "default", source["metadata"]["name"], {"a": "1"})
        second = store.annotate(KIND_SOURCE, "default", source["metadata"]["name"], {"a": "1"})

        assert second["metadata"]["resourceVersion"] == first["metadata"]["resourceVersion"]

    def test_missing_object(self, store):
        with pytest.raises(NotFound):
            store.annotate(KIND_SOURCE, "default", "missing", {"a": "1"})
