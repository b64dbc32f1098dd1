"""Utility functions for the Source Operator."""

from .conditions import (
    remove_condition,
    set_ready_condition,
    set_secret_not_found_condition,
    update_condition,
)
from .context import (
    Cancellation,
    check_cancelled,
    get_context_dict,
    get_correlation_id,
    reconcile_scope,
    request_timeout,
    set_correlation_id,
)
from .errors import sanitize_dict, sanitize_exception
from .rate_limit import is_rate_limit_error, rate_limit_k8s
from .secrets import Credentials, read_secret_data, resolve_credentials

__all__ = [
    "update_condition",
    "remove_condition",
    "set_ready_condition",
    "set_secret_not_found_condition",
    "Cancellation",
    "check_cancelled",
    "reconcile_scope",
    "request_timeout",
    "set_correlation_id",
    "get_correlation_id",
    "get_context_dict",
    "sanitize_dict",
    "sanitize_exception",
    "rate_limit_k8s",
    "is_rate_limit_error",
    "Credentials",
    "read_secret_data",
    "resolve_credentials",
]
