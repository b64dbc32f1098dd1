"""Base object store interface."""

from __future__ import annotations

import copy
import enum
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from ... import metrics
from ...config import SYNC_CONFLICT_RETRIES
from ...constants import API_GROUP_VERSION, KIND_CLAIM, KIND_SECRET, KIND_SOURCE, KIND_VOLUME
from ...exceptions import Conflict, NotFound, SyncConflict
from ...utils.context import check_cancelled

logger = logging.getLogger(__name__)

Mutator = Callable[[dict[str, Any]], Any]

API_VERSIONS = {
    KIND_SOURCE: API_GROUP_VERSION,
    KIND_SECRET: "v1",
    KIND_VOLUME: "v1",
    KIND_CLAIM: "v1",
}

CLUSTER_SCOPED_KINDS = frozenset({KIND_VOLUME})


class ActionTaken(str, enum.Enum):
    """Outcome of a create-or-update."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


def new_object(kind: str, namespace: str | None, name: str) -> dict[str, Any]:
    """Build an empty manifest with only the identity fields set."""
    metadata: dict[str, Any] = {"name": name}
    if namespace and kind not in CLUSTER_SCOPED_KINDS:
        metadata["namespace"] = namespace
    return {"apiVersion": API_VERSIONS[kind], "kind": kind, "metadata": metadata}


class ObjectStore(ABC):
    """Typed key-value store over namespaced and cluster-scoped objects.

    Objects are plain manifest dicts. Writes to existing objects are conditional
    on ``metadata.resourceVersion`` and raise ``Conflict`` when it is stale.
    """

    def __init__(self, conflict_retries: int = SYNC_CONFLICT_RETRIES):
        self.conflict_retries = conflict_retries

    @abstractmethod
    def get(self, kind: str, namespace: str | None, name: str) -> dict[str, Any]:
        """Return the object, or raise NotFound."""

    @abstractmethod
    def create(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        """Create the object; raise Conflict if it already exists."""

    @abstractmethod
    def replace(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace the object if its resourceVersion is current, else raise Conflict."""

    @abstractmethod
    def delete(self, kind: str, namespace: str | None, name: str) -> None:
        """Delete the object, or raise NotFound."""

    @abstractmethod
    def update_status(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        status: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge ``status`` into the status sub-resource."""

    @abstractmethod
    def annotate(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        annotations: dict[str, str],
    ) -> dict[str, Any]:
        """Merge ``annotations`` into the object metadata, or raise NotFound."""

    def find(self, kind: str, namespace: str | None, name: str) -> dict[str, Any] | None:
        """Return the object or None if it does not exist."""
        try:
            return self.get(kind, namespace, name)
        except NotFound:
            return None

    def create_or_update(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        mutate: Mutator,
    ) -> tuple[ActionTaken, dict[str, Any]]:
        """Converge one object by applying ``mutate`` to its live state.

        The mutator receives a copy of the current object, or a fresh one with
        only identity fields set, and edits it in place. Nothing is written when
        the mutated copy equals the current state. Conflicting writes are
        retried immediately with a fresh read, as are replaces of an object
        deleted after the read, up to ``conflict_retries`` times.

        Args:
            kind: Resource kind
            namespace: Namespace, ignored for cluster-scoped kinds
            name: Object name
            mutate: Idempotent function editing only the fields it owns

        Returns:
            Tuple of the action taken and the persisted object

        Raises:
            SyncConflict: If conflicts persist after all retries
        """
        if kind in CLUSTER_SCOPED_KINDS:
            namespace = None

        for attempt in range(self.conflict_retries + 1):
            check_cancelled()
            current = self.find(kind, namespace, name)
            desired = copy.deepcopy(current) if current is not None else new_object(kind, namespace, name)
            mutate(desired)

            try:
                if current is None:
                    persisted = self.create(kind, desired)
                    action = ActionTaken.CREATED
                elif desired == current:
                    action = ActionTaken.UNCHANGED
                    persisted = current
                else:
                    persisted = self.replace(kind, desired)
                    action = ActionTaken.UPDATED
            except (Conflict, NotFound) as e:
                # NotFound: deleted between read and replace; the next read recreates it
                metrics.sync_conflicts_total.labels(kind=kind).inc()
                logger.info(
                    f"{type(e).__name__} writing {kind} {name} (attempt {attempt + 1}/{self.conflict_retries + 1})"
                )
                continue

            metrics.dependent_operations_total.labels(kind=kind, action=action.value).inc()
            return action, persisted

        raise SyncConflict(
            f"{kind} {name} kept conflicting after {self.conflict_retries} retries"
        )
