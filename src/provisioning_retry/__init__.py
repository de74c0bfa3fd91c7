"""
Retry classification for a cloud-infrastructure provisioning client.

Decides whether an error returned by a remote management API (REST or RPC)
is worth retrying, and with what delay hint:

- errors: Error Shape Adapter turning raw exceptions into TransportError
- predicates: Text-pattern matchers and status-code classifiers
- pipelines: Ordered predicate pipelines per backend family
- retry: Async retry loop driven by a pipeline

Call configure_from_settings() once at process start to set up logging.
"""

from provisioning_retry.errors import TransportError, adapt
from provisioning_retry.logging_config import configure_from_settings
from provisioning_retry.pipelines import (
    APP_ENGINE,
    COMMON_INFRA,
    PIPELINES,
    QUOTA_AWARE,
    RPC,
    PredicatePipeline,
    RetryDecision,
    get_pipeline,
)

__version__ = "0.1.0"

__all__ = [
    "TransportError",
    "adapt",
    "RetryDecision",
    "PredicatePipeline",
    "PIPELINES",
    "APP_ENGINE",
    "COMMON_INFRA",
    "QUOTA_AWARE",
    "RPC",
    "get_pipeline",
    "configure_from_settings",
]
