"""Structured logging configuration for the Source Operator."""

import json
import logging
import sys
from typing import Any

from .config import LOG_LEVEL
from .utils.context import get_context_dict
from .utils.errors import sanitize_dict


def setup_structured_logging(level: str = LOG_LEVEL) -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event.

    Extra fields are passed through secret redaction before they are written.
    """
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(sanitize_dict(kwargs))
    log_data.update(get_context_dict())
    logger.log(level, json.dumps(log_data, default=str))
