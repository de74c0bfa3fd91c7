"""
Named pipelines for each backend family, and the read-only registry.

Call sites pick a pipeline explicitly (by value or by name); nothing here
is mutable after import.
"""

from types import MappingProxyType

from provisioning_retry.errors.exceptions import UnknownPipelineError
from provisioning_retry.pipelines.pipeline import PredicatePipeline
from provisioning_retry.predicates.status_codes import (
    CommonRetryableStatus,
    NetworkFailure,
    RpcStatusTable,
)
from provisioning_retry.predicates.text_matchers import (
    IdentityPropagationDelayMatcher,
    OperationInProgressMatcher,
    PerDayQuotaExceededMatcher,
    PerMinuteQuotaExceededMatcher,
)

# App-Engine-style services: only known phrases are transient, everything
# else (including bare 404/500) is definitive.
APP_ENGINE = PredicatePipeline(
    "app_engine",
    [
        OperationInProgressMatcher(),
        IdentityPropagationDelayMatcher(),
    ],
)

COMMON_INFRA = PredicatePipeline(
    "common_infra",
    [
        NetworkFailure(),
        CommonRetryableStatus(),
    ],
)

# Per-minute check first; any other 403 falls through to the default.
QUOTA_AWARE = PredicatePipeline(
    "quota_aware",
    [
        PerMinuteQuotaExceededMatcher(),
        PerDayQuotaExceededMatcher(),
        *COMMON_INFRA.predicates,
    ],
)

RPC = PredicatePipeline("rpc", [RpcStatusTable()])

PIPELINES = MappingProxyType(
    {pipeline.name: pipeline for pipeline in (APP_ENGINE, COMMON_INFRA, QUOTA_AWARE, RPC)}
)


def get_pipeline(name: str) -> PredicatePipeline:
    """
    Look up a registered pipeline by name.
    
    Raises:
        UnknownPipelineError: If no pipeline is registered under this name
    """
    try:
        return PIPELINES[name]
    except KeyError:
        raise UnknownPipelineError(name, sorted(PIPELINES)) from None
