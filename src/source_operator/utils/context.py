"""Per-cycle context: correlation ids and cancellation."""

from __future__ import annotations

import contextvars
import threading
import time
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from ..exceptions import Cancelled

# Context variable for storing correlation ID
correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


class Cancellation:
    """Cancellation signal and optional deadline for one reconciliation cycle.

    Args:
        timeout: Seconds from now until the cycle is considered expired
        event: Externally owned event; setting it cancels the cycle
    """

    def __init__(self, timeout: float | None = None, event: threading.Event | None = None):
        self.event = event or threading.Event()
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self.event.set()

    @property
    def cancelled(self) -> bool:
        return self.event.is_set() or self.remaining() == 0.0

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def check(self) -> None:
        """Raise Cancelled if the cycle should stop."""
        if self.event.is_set():
            raise Cancelled("reconciliation cancelled")
        if self.remaining() == 0.0:
            raise Cancelled("reconciliation deadline exceeded")


_cancellation: contextvars.ContextVar[Cancellation | None] = contextvars.ContextVar(
    "cancellation", default=None
)


def set_correlation_id(corr_id: str) -> None:
    """Set the correlation ID in the current context."""
    correlation_id.set(corr_id)


def get_correlation_id() -> str | None:
    """Get the correlation ID from the current context."""
    return correlation_id.get()


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:16]


@contextmanager
def reconcile_scope(
    cancellation: Cancellation | None = None,
    corr_id: str | None = None,
) -> Iterator[Cancellation]:
    """Install a cancellation signal and correlation ID for the duration of a cycle.

    Args:
        cancellation: Signal to honor; a fresh one without deadline is used if omitted
        corr_id: Correlation ID; a new one is generated if omitted

    Yields:
        The active cancellation
    """
    cancellation = cancellation or Cancellation()
    corr_token = correlation_id.set(corr_id or new_correlation_id())
    cancel_token = _cancellation.set(cancellation)
    try:
        yield cancellation
    finally:
        _cancellation.reset(cancel_token)
        correlation_id.reset(corr_token)


def check_cancelled() -> None:
    """Raise Cancelled if the active cycle was cancelled or ran out of time."""
    cancellation = _cancellation.get()
    if cancellation is not None:
        cancellation.check()


def request_timeout() -> float | None:
    """Remaining time budget for a blocking call in the active cycle."""
    cancellation = _cancellation.get()
    if cancellation is None:
        return None
    return cancellation.remaining()


def get_context_dict(additional: dict[str, Any] | None = None) -> dict[str, Any]:
    """Get a dictionary of context values including the correlation ID."""
    ctx: dict[str, Any] = {}

    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id

    if additional:
        ctx.update(additional)

    return ctx
