"""
Status-code classifiers: fixed tables, independent of message content.
"""

from provisioning_retry.errors.models import ErrorFamily, RpcCode, TransportError
from provisioning_retry.predicates.base import NO_MATCH, PredicateResult

COMMON_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503})

RETRYABLE_RPC_CODES = frozenset(
    {
        RpcCode.FAILED_PRECONDITION,
        RpcCode.UNAVAILABLE,
        RpcCode.ABORTED,
        RpcCode.RESOURCE_EXHAUSTED,
    }
)


class CommonRetryableStatus:
    """REST status codes that are transient whatever the body says."""

    name = "common_retryable_status"

    def __init__(self, status_codes: frozenset[int] = COMMON_RETRYABLE_STATUS_CODES):
        self.status_codes = frozenset(status_codes)

    def evaluate(self, error: TransportError) -> PredicateResult:
        if error.family is not ErrorFamily.REST or error.status_code not in self.status_codes:
            return NO_MATCH
        return PredicateResult.retry(
            f"Retryable HTTP status {error.status_code}",
            delay_hint=error.retry_after,
        )


class RpcStatusTable:
    """
    RPC status lookup for RPC-family errors.
    
    Every recognized code gets a definite answer; errors without a
    recognized code are left to the pipeline default.
    """

    name = "rpc_status_table"

    def __init__(self, retryable_codes: frozenset[RpcCode] = RETRYABLE_RPC_CODES):
        self.retryable_codes = frozenset(retryable_codes)

    def evaluate(self, error: TransportError) -> PredicateResult:
        if error.family is not ErrorFamily.RPC or error.rpc_code is None:
            return NO_MATCH
        if error.rpc_code in self.retryable_codes:
            return PredicateResult.retry(f"Transient RPC status {error.rpc_code.name}")
        return PredicateResult.give_up(f"Permanent RPC status {error.rpc_code.name}")


class NetworkFailure:
    """Timeouts, resets and refused connections never reached the API."""

    name = "network_failure"

    def evaluate(self, error: TransportError) -> PredicateResult:
        if error.family is not ErrorFamily.NETWORK:
            return NO_MATCH
        return PredicateResult.retry("Network failure before a response was received")
