"""Builder for the PersistentVolumeClaim bound to a Source's volume."""

from __future__ import annotations

from typing import Any

from ..constants import (
    ACCESS_MODE_RWX,
    CLAIM_STORAGE_REQUEST,
    DEFAULT_STORAGE_CLASS,
    LABEL_SOURCE_NAME,
)
from ..exceptions import OwnerReferenceRejected
from .source import SourceSpec
from .volume import ensure_labels


def set_controller_reference(obj: dict[str, Any], source: SourceSpec) -> None:
    """Make the Source the controlling owner of ``obj``.

    Raises:
        OwnerReferenceRejected: If another controller owns the object, or the
            Source cannot own it (no uid yet, or being deleted)
    """
    refs = obj.setdefault("metadata", {}).setdefault("ownerReferences", [])
    for ref in refs:
        if not ref.get("controller"):
            continue
        if source.uid and ref.get("uid") == source.uid:
            return
        raise OwnerReferenceRejected(
            f"{obj['metadata'].get('name')} is already controlled by "
            f"{ref.get('kind')} {ref.get('name')}"
        )

    if not source.uid:
        raise OwnerReferenceRejected(f"Source {source.name} has no uid")
    if source.deleting:
        raise OwnerReferenceRejected(f"Source {source.name} is being deleted")

    refs.append(source.owner_reference())


def mutate_claim(claim: dict[str, Any], source: SourceSpec, volume: dict[str, Any]) -> dict[str, Any]:
    """Apply the desired state of a Source to its PersistentVolumeClaim in place.

    Claim specs become immutable once bound, so every spec field is filled
    only when unset. The storage class is taken from the live volume.

    Args:
        claim: Current claim manifest, or a fresh one with identity fields only
        source: Parsed Source
        volume: Live PersistentVolume as persisted in this cycle

    Returns:
        The same claim dict

    Raises:
        OwnerReferenceRejected: If the controller reference cannot be set
    """
    set_controller_reference(claim, source)
    ensure_labels(claim, source)

    spec = claim.setdefault("spec", {})
    if not spec.get("accessModes"):
        spec["accessModes"] = [ACCESS_MODE_RWX]
    requests = spec.setdefault("resources", {}).setdefault("requests", {})
    if not requests.get("storage"):
        requests["storage"] = CLAIM_STORAGE_REQUEST
    if not spec.get("storageClassName"):
        volume_class = (volume.get("spec") or {}).get("storageClassName")
        spec["storageClassName"] = volume_class or DEFAULT_STORAGE_CLASS
    if not spec.get("selector"):
        spec["selector"] = {"matchLabels": {LABEL_SOURCE_NAME: source.name}}

    return claim
