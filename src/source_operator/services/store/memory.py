"""In-process object store with optimistic concurrency and owner-reference GC."""

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from ...config import SYNC_CONFLICT_RETRIES
from ...exceptions import Conflict, NotFound
from ...utils.context import check_cancelled
from .base import CLUSTER_SCOPED_KINDS, ObjectStore

_Key = tuple[str, str | None, str]


class MemoryStore(ObjectStore):
    """Object store kept in a dict.

    Mirrors the API server behaviors the reconciler depends on: uid and
    resourceVersion assignment, conditional replace, status as a separate
    sub-resource, and cascading deletion of objects whose owner references
    point at a deleted owner.
    """

    def __init__(self, conflict_retries: int = SYNC_CONFLICT_RETRIES):
        super().__init__(conflict_retries)
        self._objects: dict[_Key, dict[str, Any]] = {}
        self._version = 0
        self._lock = threading.RLock()

    def _key(self, kind: str, namespace: str | None, name: str) -> _Key:
        if kind in CLUSTER_SCOPED_KINDS:
            namespace = None
        return (kind, namespace, name)

    def _key_of(self, kind: str, obj: dict[str, Any]) -> _Key:
        metadata = obj.get("metadata", {})
        return self._key(kind, metadata.get("namespace"), metadata["name"])

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def get(self, kind: str, namespace: str | None, name: str) -> dict[str, Any]:
        check_cancelled()
        with self._lock:
            key = self._key(kind, namespace, name)
            if key not in self._objects:
                raise NotFound(kind, name, key[1])
            return copy.deepcopy(self._objects[key])

    def create(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        check_cancelled()
        with self._lock:
            key = self._key_of(kind, obj)
            if key in self._objects:
                raise Conflict(f"{kind} {key[2]} already exists")
            stored = copy.deepcopy(obj)
            stored.setdefault("kind", kind)
            metadata = stored.setdefault("metadata", {})
            metadata["uid"] = str(uuid.uuid4())
            metadata["resourceVersion"] = self._next_version()
            metadata["creationTimestamp"] = datetime.now(timezone.utc).isoformat()
            self._objects[key] = stored
            return copy.deepcopy(stored)

    def replace(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        check_cancelled()
        with self._lock:
            key = self._key_of(kind, obj)
            current = self._objects.get(key)
            if current is None:
                raise NotFound(kind, key[2], key[1])
            version = obj.get("metadata", {}).get("resourceVersion")
            if version != current["metadata"]["resourceVersion"]:
                raise Conflict(f"{kind} {key[2]} was modified concurrently")
            stored = copy.deepcopy(obj)
            stored["metadata"]["uid"] = current["metadata"]["uid"]
            stored["metadata"]["resourceVersion"] = self._next_version()
            # Status is only writable through update_status
            if "status" in current:
                stored["status"] = copy.deepcopy(current["status"])
            else:
                stored.pop("status", None)
            self._objects[key] = stored
            return copy.deepcopy(stored)

    def delete(self, kind: str, namespace: str | None, name: str) -> None:
        check_cancelled()
        with self._lock:
            key = self._key(kind, namespace, name)
            removed = self._objects.pop(key, None)
            if removed is None:
                raise NotFound(kind, name, key[1])
            self._collect_garbage(removed["metadata"]["uid"])

    def _collect_garbage(self, owner_uid: str) -> None:
        dependents = [
            key
            for key, obj in self._objects.items()
            if any(ref.get("uid") == owner_uid for ref in obj["metadata"].get("ownerReferences", []))
        ]
        for key in dependents:
            removed = self._objects.pop(key, None)
            if removed is not None:
                self._collect_garbage(removed["metadata"]["uid"])

    def annotate(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        annotations: dict[str, str],
    ) -> dict[str, Any]:
        check_cancelled()
        with self._lock:
            key = self._key(kind, namespace, name)
            current = self._objects.get(key)
            if current is None:
                raise NotFound(kind, name, key[1])
            existing = current["metadata"].setdefault("annotations", {})
            if any(existing.get(k) != v for k, v in annotations.items()):
                existing.update(annotations)
                current["metadata"]["resourceVersion"] = self._next_version()
            return copy.deepcopy(current)

    def update_status(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        status: dict[str, Any],
    ) -> dict[str, Any]:
        check_cancelled()
        with self._lock:
            key = self._key(kind, namespace, name)
            current = self._objects.get(key)
            if current is None:
                raise NotFound(kind, name, key[1])
            current.setdefault("status", {}).update(copy.deepcopy(status))
            current["metadata"]["resourceVersion"] = self._next_version()
            return copy.deepcopy(current)

    def list(self, kind: str) -> list[dict[str, Any]]:
        """Return every stored object of a kind."""
        with self._lock:
            return [copy.deepcopy(obj) for key, obj in self._objects.items() if key[0] == kind]
