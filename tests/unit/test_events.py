"""Tests for Kubernetes event helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from source_operator.utils import events


@pytest.fixture
def body() -> dict:
    return {"metadata": {"name": "test-resource", "namespace": "default"}}


@patch("source_operator.utils.events.kopf.event")
def test_emit_event(mock_event, body):
    events.emit_event(body, "Reason", "message")

    mock_event.assert_called_once_with(body, reason="Reason", message="message", type="Normal")


@pytest.mark.parametrize("emit,reason,type_", [
    (events.emit_reconcile_failed, "ReconcileFailed", "Warning"),
    (events.emit_validate_failed, "ValidateFailed", "Warning"),
    (events.emit_secret_not_found, "SecretNotFound", "Warning"),
])
@patch("source_operator.utils.events.kopf.event")
def test_warning_events(mock_event, body, emit, reason, type_):
    emit(body, "details")

    assert mock_event.call_args[1] == {"reason": reason, "message": "details", "type": type_}


@pytest.mark.parametrize("emit,reason,message", [
    (events.emit_volume_created, "VolumeCreated", "PersistentVolume test-resource created"),
    (events.emit_volume_updated, "VolumeUpdated", "PersistentVolume test-resource updated"),
    (events.emit_claim_created, "ClaimCreated", "PersistentVolumeClaim test-resource created"),
    (events.emit_claim_updated, "ClaimUpdated", "PersistentVolumeClaim test-resource updated"),
])
@patch("source_operator.utils.events.kopf.event")
def test_sync_events(mock_event, body, emit, reason, message):
    emit(body, "test-resource")

    assert mock_event.call_args[1] == {"reason": reason, "message": message, "type": "Normal"}
