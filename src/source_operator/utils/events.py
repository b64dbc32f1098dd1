"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CLAIM_CREATED,
    EVENT_REASON_CLAIM_UPDATED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_SECRET_NOT_FOUND,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VOLUME_CREATED,
    EVENT_REASON_VOLUME_UPDATED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Resource body the event refers to
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_failed(body: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(body, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_secret_not_found(body: dict[str, Any], message: str) -> None:
    emit_event(body, EVENT_REASON_SECRET_NOT_FOUND, message, type_="Warning")


def emit_volume_created(body: dict[str, Any], volume_name: str) -> None:
    emit_event(body, EVENT_REASON_VOLUME_CREATED, f"PersistentVolume {volume_name} created")


def emit_volume_updated(body: dict[str, Any], volume_name: str) -> None:
    emit_event(body, EVENT_REASON_VOLUME_UPDATED, f"PersistentVolume {volume_name} updated")


def emit_claim_created(body: dict[str, Any], claim_name: str) -> None:
    emit_event(body, EVENT_REASON_CLAIM_CREATED, f"PersistentVolumeClaim {claim_name} created")


def emit_claim_updated(body: dict[str, Any], claim_name: str) -> None:
    emit_event(body, EVENT_REASON_CLAIM_UPDATED, f"PersistentVolumeClaim {claim_name} updated")
