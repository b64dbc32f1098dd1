"""Kubernetes API backed object store implementation."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from urllib3.exceptions import MaxRetryError, NewConnectionError, TimeoutError as Urllib3TimeoutError

from ... import metrics
from ...config import SYNC_CONFLICT_RETRIES
from ...constants import (
    API_GROUP,
    API_VERSION,
    FIELD_MANAGER,
    KIND_CLAIM,
    KIND_SECRET,
    KIND_SOURCE,
    KIND_VOLUME,
    SOURCE_PLURAL,
)
from ...exceptions import Cancelled, Conflict, NotFound
from ...utils.context import check_cancelled, request_timeout
from ...utils.rate_limit import is_rate_limit_error, rate_limit_k8s
from ..store.base import ObjectStore

logger = logging.getLogger(__name__)


def _timed_out(error: Exception | None) -> bool:
    if isinstance(error, MaxRetryError):
        error = error.reason
    # NewConnectionError derives from ConnectTimeoutError but means the connection was refused
    return isinstance(error, Urllib3TimeoutError) and not isinstance(error, NewConnectionError)


class KubernetesStore(ObjectStore):
    """Object store talking to the Kubernetes API server."""

    def __init__(
        self,
        core_api: client.CoreV1Api,
        custom_api: client.CustomObjectsApi,
        conflict_retries: int = SYNC_CONFLICT_RETRIES,
    ) -> None:
        """Initialize the store.

        Args:
            core_api: Client for Secrets, PersistentVolumes and PersistentVolumeClaims
            custom_api: Client for Source custom resources
            conflict_retries: Immediate retries of a conflicting create-or-update
        """
        super().__init__(conflict_retries)
        self.core_api = core_api
        self.custom_api = custom_api
        self._serializer = client.ApiClient()

    def _call(
        self,
        operation: str,
        target: tuple[str, str | None, str],
        fn: Callable[..., Any],
        **kwargs: Any,
    ) -> Any:
        """Invoke an API method with cancellation, timeout, metrics and error mapping.

        Args:
            operation: Operation label for metrics
            target: (kind, namespace, name) of the object, used for error mapping
            fn: Bound API client method
            **kwargs: Arguments for the API method
        """
        kind, namespace, name = target
        check_cancelled()
        timeout = request_timeout()
        if timeout is not None:
            kwargs["_request_timeout"] = timeout

        start_time = time.time()
        try:
            result = rate_limit_k8s(fn)(**kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except ApiException as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            if is_rate_limit_error(e):
                metrics.rate_limit_hits_total.labels(api_type="k8s").inc()
            if e.status == 404:
                raise NotFound(kind, name, namespace) from e
            if e.status == 409:
                raise Conflict(f"{kind} {name}: {e.reason}") from e
            raise
        except (Urllib3TimeoutError, MaxRetryError) as e:
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
            # The request timeout is the remaining cycle budget
            if timeout is not None and (_timed_out(e) or request_timeout() == 0.0):
                raise Cancelled(f"reconciliation deadline exceeded during {operation}") from e
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self._serializer.sanitize_for_serialization(obj)

    def get(self, kind: str, namespace: str | None, name: str) -> dict[str, Any]:
        operation = f"get_{kind.lower()}"
        if kind == KIND_SOURCE:
            obj = self._call(
                operation, (kind, namespace, name),
                self.custom_api.get_namespaced_custom_object,
                group=API_GROUP, version=API_VERSION, plural=SOURCE_PLURAL,
                namespace=namespace, name=name,
            )
        elif kind == KIND_SECRET:
            obj = self._call(
                operation, (kind, namespace, name),
                self.core_api.read_namespaced_secret, name=name, namespace=namespace,
            )
        elif kind == KIND_VOLUME:
            obj = self._call(operation, (kind, None, name), self.core_api.read_persistent_volume, name=name)
        elif kind == KIND_CLAIM:
            obj = self._call(
                operation, (kind, namespace, name),
                self.core_api.read_namespaced_persistent_volume_claim, name=name, namespace=namespace,
            )
        else:
            raise ValueError(f"Unsupported kind {kind}")
        return self._to_dict(obj)

    def create(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        metadata = obj["metadata"]
        name = metadata["name"]
        namespace = metadata.get("namespace")
        operation = f"create_{kind.lower()}"
        if kind == KIND_VOLUME:
            result = self._call(
                operation, (kind, None, name),
                self.core_api.create_persistent_volume, body=obj, field_manager=FIELD_MANAGER,
            )
        elif kind == KIND_CLAIM:
            result = self._call(
                operation, (kind, namespace, name),
                self.core_api.create_namespaced_persistent_volume_claim,
                namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
            )
        else:
            raise ValueError(f"Unsupported kind {kind}")
        return self._to_dict(result)

    def replace(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        # resourceVersion in the body makes the write conditional; a stale one yields 409
        metadata = obj["metadata"]
        name = metadata["name"]
        namespace = metadata.get("namespace")
        operation = f"replace_{kind.lower()}"
        if kind == KIND_VOLUME:
            result = self._call(
                operation, (kind, None, name),
                self.core_api.replace_persistent_volume, name=name, body=obj, field_manager=FIELD_MANAGER,
            )
        elif kind == KIND_CLAIM:
            result = self._call(
                operation, (kind, namespace, name),
                self.core_api.replace_namespaced_persistent_volume_claim,
                name=name, namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
            )
        else:
            raise ValueError(f"Unsupported kind {kind}")
        return self._to_dict(result)

    def delete(self, kind: str, namespace: str | None, name: str) -> None:
        operation = f"delete_{kind.lower()}"
        if kind == KIND_VOLUME:
            self._call(operation, (kind, None, name), self.core_api.delete_persistent_volume, name=name)
        elif kind == KIND_CLAIM:
            self._call(
                operation, (kind, namespace, name),
                self.core_api.delete_namespaced_persistent_volume_claim, name=name, namespace=namespace,
            )
        else:
            raise ValueError(f"Unsupported kind {kind}")

    def annotate(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        annotations: dict[str, str],
    ) -> dict[str, Any]:
        if kind != KIND_SOURCE:
            raise ValueError(f"Unsupported kind {kind}")
        return self._to_dict(self._call(
            "annotate_source", (kind, namespace, name),
            self.custom_api.patch_namespaced_custom_object,
            group=API_GROUP, version=API_VERSION, plural=SOURCE_PLURAL,
            namespace=namespace, name=name, body={"metadata": {"annotations": annotations}},
            field_manager=FIELD_MANAGER,
        ))

    def update_status(
        self,
        kind: str,
        namespace: str | None,
        name: str,
        status: dict[str, Any],
    ) -> dict[str, Any]:
        if kind != KIND_SOURCE:
            raise ValueError(f"Unsupported kind {kind}")
        return self._call(
            "update_source_status", (kind, namespace, name),
            self.custom_api.patch_namespaced_custom_object_status,
            group=API_GROUP, version=API_VERSION, plural=SOURCE_PLURAL,
            namespace=namespace, name=name, body={"status": status},
            field_manager=FIELD_MANAGER,
        )


def get_kubernetes_store() -> KubernetesStore:
    """Build a KubernetesStore from in-cluster config, falling back to kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return KubernetesStore(client.CoreV1Api(), client.CustomObjectsApi())
