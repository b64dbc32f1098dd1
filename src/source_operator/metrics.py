"""Prometheus metrics for the Source Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "source_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "source_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

requeue_total = Counter(
    "source_operator_requeue_total",
    "Total number of delayed requeues",
    ["kind", "reason"],
)

# Dependent object metrics
dependent_operations_total = Counter(
    "source_operator_dependent_operations_total",
    "Create-or-update outcomes for dependent objects",
    ["kind", "action"],
)

sync_conflicts_total = Counter(
    "source_operator_sync_conflicts_total",
    "Optimistic concurrency conflicts on dependent object writes",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "source_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "source_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "source_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)

error_total = Counter(
    "source_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "source_operator_resource_status_total",
    "Resource status observations",
    ["kind", "status"],
)
