"""Prometheus metrics for retry classification and the retry loop."""

from provisioning_retry.monitoring.metrics import (
    retry_attempts_total,
    retry_decisions_total,
    unclassifiable_errors_total,
)

__all__ = [
    "retry_decisions_total",
    "unclassifiable_errors_total",
    "retry_attempts_total",
]
