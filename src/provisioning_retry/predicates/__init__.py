"""
Retry predicates.

- base.py: Verdict, PredicateResult, RetryPredicate protocol
- text_matchers.py: Phrase matchers scoped to a status code
- status_codes.py: Fixed status tables (HTTP, RPC) and network failures
"""

from provisioning_retry.predicates.base import (
    NO_MATCH,
    PredicateResult,
    RetryPredicate,
    Verdict,
)
from provisioning_retry.predicates.status_codes import (
    COMMON_RETRYABLE_STATUS_CODES,
    RETRYABLE_RPC_CODES,
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

__all__ = [
    "Verdict",
    "PredicateResult",
    "RetryPredicate",
    "NO_MATCH",
    "OperationInProgressMatcher",
    "IdentityPropagationDelayMatcher",
    "PerMinuteQuotaExceededMatcher",
    "PerDayQuotaExceededMatcher",
    "CommonRetryableStatus",
    "RpcStatusTable",
    "NetworkFailure",
    "COMMON_RETRYABLE_STATUS_CODES",
    "RETRYABLE_RPC_CODES",
]
