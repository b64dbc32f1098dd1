"""Utilities for reading credential Secrets."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..constants import (
    KIND_SECRET,
    REQUIRED_SECRET_KEYS,
    SECRET_ACCESS_KEY_ID,
    SECRET_ENDPOINT_URL,
    SECRET_REGION,
    SECRET_SECRET_ACCESS_KEY,
)
from ..exceptions import DependencyNotReady, NotFound, ValidationFailed

if TYPE_CHECKING:
    from ..services.store.base import ObjectStore


@dataclass(frozen=True)
class Credentials:
    """Resolved S3 credentials for a Source."""

    access_key_id: str
    secret_access_key: str
    endpoint_url: str
    region: str

    def __repr__(self) -> str:
        return f"Credentials(endpoint_url={self.endpoint_url!r}, region={self.region!r})"


def decode_secret_value(value: str | bytes) -> str:
    """Decode a Secret data value.

    Values read from the API are base64 encoded; anything that does not decode
    cleanly is returned as-is.
    """
    if isinstance(value, bytes):
        return value.decode("utf-8")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return value


def read_secret_data(secret: dict[str, Any]) -> dict[str, str]:
    """Return the decoded data of a Secret manifest, including stringData."""
    result = {key: decode_secret_value(value) for key, value in (secret.get("data") or {}).items()}
    result.update(secret.get("stringData") or {})
    return result


def resolve_credentials(store: ObjectStore, namespace: str, secret_name: str) -> Credentials:
    """Read the named Secret and extract the four required credential fields.

    Args:
        store: Object store to read from
        namespace: Namespace of the Secret (the Source's namespace)
        secret_name: Name of the Secret

    Returns:
        Resolved credentials

    Raises:
        DependencyNotReady: If the Secret does not exist
        ValidationFailed: If any required key is missing or empty
    """
    try:
        secret = store.get(KIND_SECRET, namespace, secret_name)
    except NotFound as e:
        raise DependencyNotReady("Secret", secret_name, namespace) from e

    data = read_secret_data(secret)
    missing = [key for key in REQUIRED_SECRET_KEYS if not data.get(key)]
    if missing:
        raise ValidationFailed(
            f"Secret {secret_name} is missing required keys: {', '.join(missing)}"
        )

    return Credentials(
        access_key_id=data[SECRET_ACCESS_KEY_ID],
        secret_access_key=data[SECRET_SECRET_ACCESS_KEY],
        endpoint_url=data[SECRET_ENDPOINT_URL],
        region=data[SECRET_REGION],
    )
