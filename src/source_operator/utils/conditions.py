"""Helpers for the ``status.conditions`` list of a Source."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import COND_READY, COND_SECRET_NOT_FOUND

Conditions = list[dict[str, Any]]


def update_condition(
    conditions: Conditions,
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> Conditions:
    """Return a copy of ``conditions`` with one condition type replaced or added.

    ``lastTransitionTime`` is carried over from the existing entry while the
    status stays the same, so re-recording an unchanged condition yields an
    identical list.

    Args:
        conditions: Current conditions
        condition_type: Condition type to set
        status: "True", "False" or "Unknown"
        reason: CamelCase reason
        message: Human readable detail
        observed_generation: Source generation the condition describes
    """
    result = [dict(cond) for cond in conditions]
    previous = next((cond for cond in result if cond.get("type") == condition_type), None)

    transition_time = datetime.now(timezone.utc).isoformat()
    if previous is not None and previous.get("status") == status:
        transition_time = previous.get("lastTransitionTime", transition_time)

    condition: dict[str, Any] = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": transition_time,
    }
    if observed_generation is not None:
        condition["observedGeneration"] = observed_generation

    if previous is None:
        result.append(condition)
    else:
        result[result.index(previous)] = condition
    return result


def remove_condition(conditions: Conditions, condition_type: str) -> Conditions:
    return [dict(cond) for cond in conditions if cond.get("type") != condition_type]


def set_ready_condition(
    conditions: Conditions,
    status: bool,
    message: str,
    observed_generation: int | None = None,
    reason: str | None = None,
) -> Conditions:
    """Record whether the volume and claim are in sync."""
    if reason is None:
        reason = "Ready" if status else "NotReady"
    return update_condition(
        conditions, COND_READY, "True" if status else "False", reason, message, observed_generation
    )


def set_secret_not_found_condition(
    conditions: Conditions,
    message: str,
    observed_generation: int | None = None,
) -> Conditions:
    return update_condition(
        conditions, COND_SECRET_NOT_FOUND, "True", COND_SECRET_NOT_FOUND, message, observed_generation
    )
