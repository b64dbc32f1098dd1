"""Handler for Source CRD."""

from __future__ import annotations

from typing import Any

import kopf

from .. import metrics
from ..config import RECONCILE_TIMEOUT_SECONDS, RESYNC_INTERVAL_SECONDS, retry_delay
from ..constants import (
    ANNOTATION_CLAIM_REVISION,
    API_GROUP_VERSION,
    CONTROLLER_NAME,
    KIND_SOURCE,
    LABEL_MANAGED_BY,
    LABEL_SOURCE_NAME,
)
from ..exceptions import Cancelled, NotFound, ValidationFailed
from ..reconciler import Outcome, ReconcileResult, SourceReconciler
from ..services.kubernetes.client import get_kubernetes_store
from ..services.store.base import ActionTaken
from ..utils.context import Cancellation
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_claim_created,
    emit_claim_updated,
    emit_reconcile_failed,
    emit_secret_not_found,
    emit_validate_failed,
    emit_volume_created,
    emit_volume_updated,
)
from .base import BaseHandler


class SourceHandler(BaseHandler):
    """Maps kopf invocations for Source resources onto the reconciler."""

    def __init__(self, reconciler: SourceReconciler | None = None):
        """Initialize source handler.

        Args:
            reconciler: Reconciler to use; one backed by the cluster API is
                created on first use when omitted
        """
        super().__init__(KIND_SOURCE)
        self._reconciler = reconciler

    @property
    def reconciler(self) -> SourceReconciler:
        if self._reconciler is None:
            self._reconciler = SourceReconciler(get_kubernetes_store())
        return self._reconciler

    def reconcile(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        retry: int = 0,
    ) -> ReconcileResult:
        """Reconcile one Source and translate the outcome for kopf.

        Raises:
            kopf.TemporaryError: With a fixed delay when the Secret is missing,
                and with exponential backoff for every failure
        """
        namespace = meta.get("namespace", "default")
        name = meta.get("name", "unknown")
        cancellation = Cancellation(timeout=RECONCILE_TIMEOUT_SECONDS)

        try:
            result = self.reconcile_with_metrics(
                meta, lambda: self.reconciler.reconcile(namespace, name, cancellation)
            )
        except ValidationFailed as e:
            message = sanitize_exception(e)
            emit_validate_failed(body, message)
            raise kopf.TemporaryError(message, delay=retry_delay(retry)) from e
        except Cancelled as e:
            raise kopf.TemporaryError(str(e), delay=retry_delay(retry)) from e
        except Exception as e:
            message = f"Reconciliation failed: {sanitize_exception(e)}"
            emit_reconcile_failed(body, message)
            raise kopf.TemporaryError(message, delay=retry_delay(retry)) from e

        if result.outcome == Outcome.CREDENTIAL_ABSENT:
            emit_secret_not_found(body, result.message)
            metrics.requeue_total.labels(kind=self.kind, reason="SecretNotFound").inc()
            metrics.resource_status_total.labels(kind=self.kind, status="not_ready").inc()
            raise kopf.TemporaryError(result.message, delay=result.requeue_after)

        if result.outcome == Outcome.CONVERGED:
            metrics.resource_status_total.labels(kind=self.kind, status="ready").inc()
            self._emit_sync_events(body, name, result)

        return result

    def _emit_sync_events(self, body: dict[str, Any], name: str, result: ReconcileResult) -> None:
        if result.volume_action == ActionTaken.CREATED:
            emit_volume_created(body, name)
        elif result.volume_action == ActionTaken.UPDATED:
            emit_volume_updated(body, name)

        if result.claim_action == ActionTaken.CREATED:
            emit_claim_created(body, name)
        elif result.claim_action == ActionTaken.UPDATED:
            emit_claim_updated(body, name)

    def request_resync_for_claim(self, claim_meta: dict[str, Any]) -> bool:
        """Mark the Source a claim belongs to so kopf re-runs its update handler.

        The cycle itself runs in the Source handler, which kopf serializes per
        Source. Writing the claim revision into a Source annotation changes the
        Source, so a changed or deleted claim is re-converged without a second
        cycle for the same key running alongside.

        Returns:
            Whether the Source was annotated
        """
        source_name = (claim_meta.get("labels") or {}).get(LABEL_SOURCE_NAME)
        namespace = claim_meta.get("namespace")
        if not source_name or not namespace:
            return False

        source_meta = {"name": source_name, "namespace": namespace}
        revision = f"{claim_meta.get('uid', '')}/{claim_meta.get('resourceVersion', '')}"
        try:
            self.reconciler.store.annotate(
                KIND_SOURCE, namespace, source_name, {ANNOTATION_CLAIM_REVISION: revision}
            )
        except NotFound:
            return False
        except Exception as e:
            # Claim events are not retried by kopf; the periodic resync covers this
            self.log_warning(
                source_meta,
                f"Failed to request resync after claim change: {sanitize_exception(e)}",
                reason="ClaimResyncRequestFailed",
            )
            return False

        self.log_info(
            source_meta, f"Claim {claim_meta.get('name')} changed, resync requested", reason="ClaimChanged"
        )
        return True


# Global handler instance
_handler = SourceHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_SOURCE)
@kopf.on.update(API_GROUP_VERSION, KIND_SOURCE)
@kopf.on.resume(API_GROUP_VERSION, KIND_SOURCE)
def handle_source(
    body: dict[str, Any],
    meta: dict[str, Any],
    retry: int,
    **kwargs: Any,
) -> None:
    """Handle Source resource reconciliation."""
    _handler.reconcile(body, meta, retry)


@kopf.timer(API_GROUP_VERSION, KIND_SOURCE, interval=RESYNC_INTERVAL_SECONDS, initial_delay=RESYNC_INTERVAL_SECONDS)
def resync_source(
    body: dict[str, Any],
    meta: dict[str, Any],
    retry: int,
    **kwargs: Any,
) -> None:
    """Periodically re-converge dependents changed out of band."""
    _handler.reconcile(body, meta, retry)


@kopf.on.event(
    "v1",
    "persistentvolumeclaims",
    labels={LABEL_MANAGED_BY: CONTROLLER_NAME, LABEL_SOURCE_NAME: kopf.PRESENT},
)
def handle_claim_event(
    event: dict[str, Any],
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Have the owning Source re-reconciled when its claim changes or disappears."""
    # None is the initial listing; the Source resume handlers cover it
    if event.get("type") in ("MODIFIED", "DELETED"):
        _handler.request_resync_for_claim(meta)
