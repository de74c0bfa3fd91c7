"""Custom Prometheus metrics for the provisioning retry layer.

Alert rules worth configuring:
- unclassifiable_errors_total (new error shapes coming back from a backend)
- retry_attempts_total{outcome="exhausted"} (a backend stuck in a transient state)
"""

from prometheus_client import Counter

# === Classification Metrics ===

retry_decisions_total = Counter(
    "retry_decisions_total",
    "Total retry decisions by pipeline, matching predicate and outcome",
    ["pipeline", "predicate", "retryable"],
)
"""
Retry decisions counter.

Labels:
- pipeline: app_engine, common_infra, quota_aware, rpc (or a custom name)
- predicate: name of the predicate that matched, "default" when none did
- retryable: true / false
"""

unclassifiable_errors_total = Counter(
    "unclassifiable_errors_total",
    "Errors the adapter could not recognize (failed closed)",
    ["pipeline"],
)

# === Retry Loop Metrics ===

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Retry loop attempts by pipeline and outcome",
    ["pipeline", "outcome"],
)
"""
Retry loop attempts counter.

Labels:
- outcome: success, retry, give_up, exhausted
"""
