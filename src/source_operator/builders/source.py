"""Parsing of Source resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..constants import API_GROUP_VERSION, KIND_SOURCE
from ..exceptions import ValidationFailed


@dataclass(frozen=True)
class SourceSpec:
    """Desired state read from a Source resource."""

    name: str
    namespace: str
    uid: str | None
    access_secret_name: str
    bucket_name: str
    storage_class_name: str | None = None
    size: str | None = None
    deleting: bool = False
    generation: int | None = None

    @classmethod
    def from_source(cls, source: dict[str, Any]) -> SourceSpec:
        """Create a SourceSpec from a Source manifest.

        ``accessSecretName`` and ``bucketName`` may also be given in the nested
        ``access: {secretName, bucketName}`` form.

        Raises:
            ValidationFailed: If the secret or bucket name is missing
        """
        meta = source.get("metadata", {})
        spec = source.get("spec") or {}
        access = spec.get("access") or {}

        secret_name = spec.get("accessSecretName") or access.get("secretName")
        bucket_name = spec.get("bucketName") or access.get("bucketName")
        if not secret_name:
            raise ValidationFailed(f"Source {meta.get('name')}: accessSecretName is required")
        if not bucket_name:
            raise ValidationFailed(f"Source {meta.get('name')}: bucketName is required")

        return cls(
            name=meta["name"],
            namespace=meta.get("namespace", "default"),
            uid=meta.get("uid"),
            access_secret_name=secret_name,
            bucket_name=bucket_name,
            storage_class_name=spec.get("storageClassName") or None,
            size=spec.get("size") or None,
            deleting=bool(meta.get("deletionTimestamp")),
            generation=meta.get("generation"),
        )

    def owner_reference(self) -> dict[str, Any]:
        """Controller owner reference pointing at this Source."""
        return {
            "apiVersion": API_GROUP_VERSION,
            "kind": KIND_SOURCE,
            "name": self.name,
            "uid": self.uid,
            "controller": True,
            "blockOwnerDeletion": True,
        }
