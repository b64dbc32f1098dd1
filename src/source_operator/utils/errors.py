"""Redaction of S3 credentials from error messages, logs and events."""

import re
from typing import Any

# key/value fragments such as "access key id: AKIA..." in driver or API errors
_CREDENTIAL_PATTERNS = [
    re.compile(r"(access[_\s-]?key[_\s-]?id[:=\s]+)([A-Za-z0-9]{16,})", re.IGNORECASE),
    re.compile(r"(secret[_\s-]?access[_\s-]?key[:=\s]+)([A-Za-z0-9/+=]{16,})", re.IGNORECASE),
    re.compile(r"(session[_\s-]?token[:=\s]+)([A-Za-z0-9/+=]+)", re.IGNORECASE),
]

# Keys whose values are never written out; includes the csi-rclone attribute names
SENSITIVE_FIELDS = {
    "access_key_id",
    "secret_access_key",
    "access-key-id",
    "secret-access-key",
    "session_token",
    "password",
    "secret_key",
    "credentials",
    "token",
}

_FIELD_PATTERNS = [
    re.compile(rf"({re.escape(field)}[\"']?[:=\s]+)(?!\[REDACTED\])([^\s,;\)\}}]+)", re.IGNORECASE)
    for field in sorted(SENSITIVE_FIELDS)
]

REDACTED = "[REDACTED]"


def sanitize_error_message(message: str) -> str:
    """Replace credential values in ``message`` with ``[REDACTED]``."""
    for pattern in _CREDENTIAL_PATTERNS + _FIELD_PATTERNS:
        message = pattern.sub(rf"\1{REDACTED}", message)
    return message


def sanitize_exception(error: Exception) -> str:
    return sanitize_error_message(str(error))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Return a copy of ``data`` safe for logging.

    Values under keys containing a sensitive name are replaced, nested dicts
    are walked, and string values are scrubbed like error messages.

    Args:
        data: Mapping to sanitize, e.g. extra log fields or volume attributes
        sensitive_keys: Key names to redact in addition to SENSITIVE_FIELDS
    """
    names = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if any(name in key.lower() for name in names):
            sanitized[key] = REDACTED
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value
    return sanitized
