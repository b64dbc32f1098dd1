"""Object store interface and implementations."""

from .base import ActionTaken, Mutator, ObjectStore
from .memory import MemoryStore

__all__ = ["ActionTaken", "Mutator", "ObjectStore", "MemoryStore"]
