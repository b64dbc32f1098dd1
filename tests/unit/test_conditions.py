"""Unit tests for condition utilities."""

from __future__ import annotations

from source_operator.utils.conditions import (
    remove_condition,
    set_ready_condition,
    set_secret_not_found_condition,
    update_condition,
)


class TestConditions:
    """Test condition utilities."""

    def test_update_condition_new(self) -> None:
        """Test adding a new condition."""
        result = update_condition([], "TestCondition", "True", "TestReason", "Test message", observed_generation=1)

        assert len(result) == 1
        assert result[0]["type"] == "TestCondition"
        assert result[0]["status"] == "True"
        assert result[0]["reason"] == "TestReason"
        assert result[0]["message"] == "Test message"
        assert result[0]["observedGeneration"] == 1
        assert "lastTransitionTime" in result[0]

    def test_update_condition_status_change(self) -> None:
        conditions = [{
            "type": "TestCondition",
            "status": "False",
            "reason": "OldReason",
            "message": "Old message",
            "lastTransitionTime": "2023-01-01T00:00:00Z",
        }]

        result = update_condition(conditions, "TestCondition", "True", "NewReason", "New message")

        assert len(result) == 1
        assert result[0]["status"] == "True"
        assert result[0]["lastTransitionTime"] != "2023-01-01T00:00:00Z"

    def test_update_condition_keeps_transition_time(self) -> None:
        """Test that lastTransitionTime only moves when status changes."""
        conditions = [{
            "type": "TestCondition",
            "status": "True",
            "reason": "R",
            "message": "m",
            "lastTransitionTime": "2023-01-01T00:00:00Z",
        }]

        result = update_condition(conditions, "TestCondition", "True", "R", "m")

        assert result == conditions

    def test_update_condition_does_not_mutate_input(self) -> None:
        conditions = [{"type": "Other", "status": "True"}]

        result = update_condition(conditions, "TestCondition", "True", "R", "m")

        assert len(conditions) == 1
        assert len(result) == 2

    def test_set_ready_condition(self) -> None:
        result = set_ready_condition([], True, "in sync", observed_generation=1)

        assert result[0]["type"] == "Ready"
        assert result[0]["status"] == "True"
        assert result[0]["reason"] == "Ready"

    def test_set_ready_condition_false(self) -> None:
        result = set_ready_condition([], False, "Secret s not found", reason="SecretNotFound")

        assert result[0]["status"] == "False"
        assert result[0]["reason"] == "SecretNotFound"

    def test_set_ready_condition_false_default_reason(self) -> None:
        assert set_ready_condition([], False, "x")[0]["reason"] == "NotReady"

    def test_set_secret_not_found_condition(self) -> None:
        result = set_secret_not_found_condition([], "Secret s not found", observed_generation=3)

        assert result[0]["type"] == "SecretNotFound"
        assert result[0]["status"] == "True"
        assert result[0]["observedGeneration"] == 3

    def test_remove_condition(self) -> None:
        conditions = set_secret_not_found_condition(set_ready_condition([], False, "x"), "x")

        result = remove_condition(conditions, "SecretNotFound")

        assert [cond["type"] for cond in result] == ["Ready"]
        assert len(conditions) == 2

    def test_remove_missing_condition(self) -> None:
        assert remove_condition([], "SecretNotFound") == []
