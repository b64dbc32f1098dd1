"""Exceptions raised while reconciling Source resources."""

from __future__ import annotations


class SourceOperatorError(Exception):
    """Base class for all operator errors."""


class NotFound(SourceOperatorError):
    """An object does not exist in the object store."""

    def __init__(self, kind: str, name: str, namespace: str | None = None):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        where = f"{namespace}/{name}" if namespace else name
        super().__init__(f"{kind} {where} not found")


class Conflict(SourceOperatorError):
    """A conditional write lost against a concurrent writer."""


class DependencyNotReady(SourceOperatorError):
    """A referenced object is not available yet. Retried after a delay."""

    def __init__(self, kind: str, name: str, namespace: str | None = None):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        super().__init__(f"{kind} {name} not found")


class ValidationFailed(SourceOperatorError, ValueError):
    """An object is present but malformed. Not retried within the cycle."""


class SyncConflict(SourceOperatorError):
    """Conflicts persisted after the bounded number of immediate retries."""


class OwnerReferenceRejected(SourceOperatorError):
    """The controller owner reference could not be set."""


class Cancelled(SourceOperatorError):
    """The cycle was cancelled or ran past its deadline."""
