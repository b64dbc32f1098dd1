"""Main entry point for the Source Operator."""

from __future__ import annotations

from typing import Any

import kopf

from . import handlers  # noqa: F401  registers the kopf handlers
from . import health
from . import logging as structured_logging
from .config import MAX_WORKERS, METRICS_PORT, WATCH_NAMESPACE
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Keep handler progress out of the status sub-resource the reconciler writes
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = MAX_WORKERS

    health.start_http_server(METRICS_PORT)
    health.mark_ready()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not ready while the operator stops."""
    health.mark_not_ready()


def run() -> None:
    """Run the operator until interrupted."""
    if WATCH_NAMESPACE:
        kopf.run(namespaces=[WATCH_NAMESPACE], clusterwide=False)
    else:
        kopf.run(clusterwide=True)


if __name__ == "__main__":
    run()
