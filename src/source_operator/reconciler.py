"""Reconciliation of Source resources into a PersistentVolume and claim."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from .builders.claim import mutate_claim
from .builders.source import SourceSpec
from .builders.volume import mutate_volume
from .config import REQUEUE_DELAY_SECONDS
from .constants import (
    COND_SECRET_NOT_FOUND,
    CONTROLLER_NAME,
    KIND_CLAIM,
    KIND_SOURCE,
    KIND_VOLUME,
)
from .exceptions import Cancelled, DependencyNotReady
from .logging import log_resource_event
from .services.store.base import ActionTaken, ObjectStore
from .tracing import add_span_attribute, trace_span
from .utils.conditions import (
    remove_condition,
    set_ready_condition,
    set_secret_not_found_condition,
)
from .utils.context import Cancellation, reconcile_scope
from .utils.errors import sanitize_exception
from .utils.secrets import resolve_credentials

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    """How a reconciliation cycle ended without raising."""

    SOURCE_ABSENT = "SourceAbsent"
    CREDENTIAL_ABSENT = "CredentialAbsent"
    CONVERGED = "Converged"


@dataclass
class ReconcileResult:
    """Result of one reconciliation cycle."""

    outcome: Outcome
    requeue_after: float | None = None
    volume_action: ActionTaken | None = None
    claim_action: ActionTaken | None = None
    message: str = ""

    @property
    def requeue(self) -> bool:
        return self.requeue_after is not None

    @property
    def changed(self) -> bool:
        """Whether any dependent object was written."""
        return any(
            action not in (None, ActionTaken.UNCHANGED)
            for action in (self.volume_action, self.claim_action)
        )


def parse_key(key: str | tuple[str, str]) -> tuple[str, str]:
    """Split a ``namespace/name`` key."""
    if isinstance(key, tuple):
        return key
    namespace, sep, name = key.partition("/")
    if not sep or not namespace or not name:
        raise ValueError(f"Invalid key {key!r}, expected namespace/name")
    return namespace, name


class SourceReconciler:
    """Drives the PersistentVolume and claim of one Source toward its spec.

    The reconciler holds no state between cycles; every call recomputes the
    desired state from the current Source. Callers must serialize cycles for
    the same key.

    Args:
        store: Object store holding Sources, Secrets, volumes and claims
        requeue_delay: Seconds before retrying a Source whose Secret is missing
    """

    # Kinds whose changes should trigger a cycle for the owning Source
    watches = (KIND_SOURCE, KIND_CLAIM)

    def __init__(self, store: ObjectStore, requeue_delay: float = REQUEUE_DELAY_SECONDS):
        self.store = store
        self.requeue_delay = requeue_delay

    def on_event(
        self,
        key: str | tuple[str, str],
        cancellation: Cancellation | None = None,
    ) -> ReconcileResult:
        """Entry point for any event substrate."""
        namespace, name = parse_key(key)
        return self.reconcile(namespace, name, cancellation)

    def reconcile(
        self,
        namespace: str,
        name: str,
        cancellation: Cancellation | None = None,
    ) -> ReconcileResult:
        """Run one reconciliation cycle for the Source ``namespace/name``.

        Returns:
            The cycle result; ``requeue_after`` is set when the Secret is missing

        Raises:
            ValidationFailed: If the Source or its Secret is malformed
            SyncConflict: If dependent writes kept conflicting
            OwnerReferenceRejected: If the claim cannot be owned by the Source
            Cancelled: If the cycle was cancelled or timed out
        """
        with reconcile_scope(cancellation):
            with trace_span("reconcile_source", kind=KIND_SOURCE, attributes={"source.name": name}):
                return self._reconcile(namespace, name)

    def _reconcile(self, namespace: str, name: str) -> ReconcileResult:
        source_obj = self.store.find(KIND_SOURCE, namespace, name)
        if source_obj is None:
            self._log(namespace, name, "", "Source not found, nothing to do", reason="SourceAbsent")
            return ReconcileResult(Outcome.SOURCE_ABSENT)

        source = SourceSpec.from_source(source_obj)
        uid = source.uid or ""

        with trace_span("resolve_credentials", kind=KIND_SOURCE):
            try:
                credentials = resolve_credentials(self.store, namespace, source.access_secret_name)
            except DependencyNotReady:
                message = f"Secret {source.access_secret_name} not found"
                self._log(
                    namespace, name, uid, message,
                    reason="SecretNotFound", level=logging.WARNING,
                    requeue_after=self.requeue_delay,
                )
                self._record_status(source_obj, self._not_ready_status(source_obj, source, message))
                return ReconcileResult(
                    Outcome.CREDENTIAL_ABSENT,
                    requeue_after=self.requeue_delay,
                    message=message,
                )

        # The claim copies the storage class from the live volume, so the volume goes first
        with trace_span("sync_volume", kind=KIND_VOLUME):
            volume_action, volume = self.store.create_or_update(
                KIND_VOLUME, None, source.name,
                lambda obj: mutate_volume(obj, source, credentials),
            )
            add_span_attribute("sync.action", volume_action.value)
        self._log(namespace, name, uid, f"PersistentVolume {source.name} {volume_action.value}",
                  reason="VolumeSynced", action=volume_action.value)

        with trace_span("sync_claim", kind=KIND_CLAIM):
            claim_action, _ = self.store.create_or_update(
                KIND_CLAIM, namespace, source.name,
                lambda obj: mutate_claim(obj, source, volume),
            )
            add_span_attribute("sync.action", claim_action.value)
        self._log(namespace, name, uid, f"PersistentVolumeClaim {source.name} {claim_action.value}",
                  reason="ClaimSynced", action=claim_action.value)

        self._record_status(source_obj, self._converged_status(source_obj, source))
        return ReconcileResult(
            Outcome.CONVERGED,
            volume_action=volume_action,
            claim_action=claim_action,
            message="PersistentVolume and PersistentVolumeClaim are in sync",
        )

    def _not_ready_status(self, source_obj: dict[str, Any], source: SourceSpec, message: str) -> dict[str, Any]:
        conditions = (source_obj.get("status") or {}).get("conditions", [])
        conditions = set_ready_condition(
            conditions, False, message, source.generation, reason="SecretNotFound"
        )
        conditions = set_secret_not_found_condition(conditions, message, source.generation)
        return {
            "error": message,
            "conditions": conditions,
            "observedGeneration": source.generation,
        }

    def _converged_status(self, source_obj: dict[str, Any], source: SourceSpec) -> dict[str, Any]:
        conditions = (source_obj.get("status") or {}).get("conditions", [])
        conditions = remove_condition(conditions, COND_SECRET_NOT_FOUND)
        conditions = set_ready_condition(
            conditions, True, "PersistentVolume and PersistentVolumeClaim are in sync", source.generation
        )
        return {
            "error": "",
            "conditions": conditions,
            "observedGeneration": source.generation,
            "volumeName": source.name,
            "claimName": source.name,
        }

    def _record_status(self, source_obj: dict[str, Any], status: dict[str, Any]) -> None:
        """Write ``status`` unless it is already current. Failures are logged only."""
        meta = source_obj["metadata"]
        current = source_obj.get("status") or {}
        if all(current.get(key) == value for key, value in status.items()):
            return

        try:
            self.store.update_status(KIND_SOURCE, meta.get("namespace"), meta["name"], status)
        except Cancelled:
            raise
        except Exception as e:
            self._log(
                meta.get("namespace", ""), meta["name"], meta.get("uid", ""),
                f"Failed to update status: {sanitize_exception(e)}",
                reason="StatusUpdateFailed", level=logging.WARNING,
                error_type=type(e).__name__,
            )

    def _log(
        self,
        namespace: str,
        name: str,
        uid: str,
        message: str,
        reason: str,
        level: int = logging.INFO,
        **kwargs: Any,
    ) -> None:
        log_resource_event(
            logger,
            controller=CONTROLLER_NAME,
            resource_kind=KIND_SOURCE,
            resource_name=name,
            namespace=namespace,
            uid=uid,
            event="reconcile",
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )
