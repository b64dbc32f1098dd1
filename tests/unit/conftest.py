"""Shared fixtures for unit tests."""

from __future__ import annotations

from typing import Any

import pytest

from factories import make_secret, make_source
from source_operator.constants import KIND_SECRET, KIND_SOURCE
from source_operator.services.store.memory import MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    """Empty in-memory object store."""
    return MemoryStore(conflict_retries=3)


@pytest.fixture
def source(store: MemoryStore) -> dict[str, Any]:
    """A stored Source referencing the default secret and bucket."""
    return store.create(KIND_SOURCE, make_source())


@pytest.fixture
def secret(store: MemoryStore) -> dict[str, Any]:
    """A stored credential Secret with all required keys."""
    return store.create(KIND_SECRET, make_secret())
