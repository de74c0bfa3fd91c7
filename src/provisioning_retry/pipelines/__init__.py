"""
Predicate pipelines per backend family.

- decision.py: RetryDecision returned to the retry loop
- pipeline.py: PredicatePipeline (ordered, fail-closed evaluation)
- registry.py: app_engine, common_infra, quota_aware and rpc pipelines
"""

from provisioning_retry.pipelines.decision import NOT_RETRYABLE, RetryDecision
from provisioning_retry.pipelines.pipeline import PredicatePipeline
from provisioning_retry.pipelines.registry import (
    APP_ENGINE,
    COMMON_INFRA,
    PIPELINES,
    QUOTA_AWARE,
    RPC,
    get_pipeline,
)

__all__ = [
    "RetryDecision",
    "NOT_RETRYABLE",
    "PredicatePipeline",
    "APP_ENGINE",
    "COMMON_INFRA",
    "QUOTA_AWARE",
    "RPC",
    "PIPELINES",
    "get_pipeline",
]
