"""Environment driven settings for the Source Operator."""

from __future__ import annotations

import os

# Fixed delay before re-reconciling a Source whose Secret is missing
REQUEUE_DELAY_SECONDS = float(os.getenv("REQUEUE_DELAY_SECONDS", "60"))

# Immediate retries of a create-or-update after a resourceVersion conflict
SYNC_CONFLICT_RETRIES = int(os.getenv("SYNC_CONFLICT_RETRIES", "5"))

# Deadline for a single reconciliation cycle
RECONCILE_TIMEOUT_SECONDS = float(os.getenv("RECONCILE_TIMEOUT_SECONDS", "30"))

# Exponential backoff for failed cycles: 1s, 2s, 4s, ... capped
MIN_RETRY_DELAY_SECONDS = float(os.getenv("MIN_RETRY_DELAY_SECONDS", "1"))
MAX_RETRY_DELAY_SECONDS = float(os.getenv("MAX_RETRY_DELAY_SECONDS", "300"))
RETRY_BACKOFF = float(os.getenv("RETRY_BACKOFF", "2"))

RESYNC_INTERVAL_SECONDS = float(os.getenv("RESYNC_INTERVAL_SECONDS", "300"))

MAX_WORKERS = int(os.getenv("MAX_WORKERS", "4"))
METRICS_PORT = int(os.getenv("METRICS_PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Empty means cluster-wide
WATCH_NAMESPACE = os.getenv("WATCH_NAMESPACE", "")


def retry_delay(retry: int) -> float:
    """Return the backoff delay for the given retry attempt (0-based)."""
    delay = MIN_RETRY_DELAY_SECONDS * (RETRY_BACKOFF ** max(retry, 0))
    return min(delay, MAX_RETRY_DELAY_SECONDS)
