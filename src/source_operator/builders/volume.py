"""Builder for the PersistentVolume backing a Source."""

from __future__ import annotations

from typing import Any

from ..constants import (
    ACCESS_MODE_RWX,
    ATTR_REMOTE,
    ATTR_REMOTE_PATH,
    ATTR_S3_ACCESS_KEY_ID,
    ATTR_S3_ENDPOINT,
    ATTR_S3_PROVIDER,
    ATTR_S3_REGION,
    ATTR_S3_SECRET_ACCESS_KEY,
    CONTROLLER_NAME,
    CSI_DRIVER,
    DEFAULT_STORAGE_CLASS,
    DEFAULT_VOLUME_CAPACITY,
    LABEL_MANAGED_BY,
    LABEL_SOURCE_NAME,
    REMOTE_TYPE,
    S3_PROVIDER,
)
from ..utils.secrets import Credentials
from .source import SourceSpec


def volume_attributes(source: SourceSpec, credentials: Credentials) -> dict[str, str]:
    """Driver attribute bag for csi-rclone."""
    return {
        ATTR_REMOTE: REMOTE_TYPE,
        ATTR_REMOTE_PATH: source.bucket_name,
        ATTR_S3_PROVIDER: S3_PROVIDER,
        ATTR_S3_ENDPOINT: credentials.endpoint_url,
        ATTR_S3_ACCESS_KEY_ID: credentials.access_key_id,
        ATTR_S3_SECRET_ACCESS_KEY: credentials.secret_access_key,
        ATTR_S3_REGION: credentials.region,
    }


def ensure_labels(obj: dict[str, Any], source: SourceSpec) -> None:
    """Add the correlation labels, keeping any other labels."""
    labels = obj.setdefault("metadata", {}).setdefault("labels", {})
    labels[LABEL_SOURCE_NAME] = source.name
    labels[LABEL_MANAGED_BY] = CONTROLLER_NAME


def mutate_volume(volume: dict[str, Any], source: SourceSpec, credentials: Credentials) -> dict[str, Any]:
    """Apply the desired state of a Source to its PersistentVolume in place.

    Storage class, capacity and access modes are defaults, filled only when
    unset. The CSI block is written once; an existing one is never touched.
    No owner reference is set since the volume is cluster-scoped.

    Args:
        volume: Current volume manifest, or a fresh one with identity fields only
        source: Parsed Source
        credentials: Resolved credentials

    Returns:
        The same volume dict
    """
    ensure_labels(volume, source)

    spec = volume.setdefault("spec", {})
    if not spec.get("storageClassName"):
        spec["storageClassName"] = source.storage_class_name or DEFAULT_STORAGE_CLASS
    if not (spec.get("capacity") or {}).get("storage"):
        spec.setdefault("capacity", {})["storage"] = source.size or DEFAULT_VOLUME_CAPACITY
    if not spec.get("accessModes"):
        spec["accessModes"] = [ACCESS_MODE_RWX]

    if not spec.get("csi"):
        spec["csi"] = {
            "driver": CSI_DRIVER,
            "volumeHandle": source.bucket_name,
            "volumeAttributes": volume_attributes(source, credentials),
        }

    return volume
