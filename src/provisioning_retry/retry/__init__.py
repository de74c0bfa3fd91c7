"""
Async retry loop driven by a predicate pipeline.

The loop calls an operation, asks the pipeline whether a failure is worth
retrying, and waits for the decision's delay hint (or exponential backoff)
before the next attempt.

Usage:
    >>> from provisioning_retry.retry import RetryEngine
    >>> engine = RetryEngine(QUOTA_AWARE, settings)
    >>> result, metadata = await engine.execute_with_retry(lambda: client.get(url))
"""

from provisioning_retry.retry.engine import RetryEngine
from provisioning_retry.retry.exceptions import RetryExhausted
from provisioning_retry.retry.metadata import RetryMetadata

__all__ = [
    "RetryEngine",
    "RetryExhausted",
    "RetryMetadata",
]
