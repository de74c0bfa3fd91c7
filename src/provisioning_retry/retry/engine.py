"""
Retry engine driven by a predicate pipeline.

Retry Policy:
    1. Call the operation
    2. On failure, classify the exception with the pipeline
    3. Non-retryable: re-raise the original exception unchanged
    4. Retryable: wait (delay hint, else exponential backoff) and try again
    5. Attempt budget spent: raise RetryExhausted

Usage:
    configure_from_settings()  # once, at process start
    engine = RetryEngine(COMMON_INFRA)
    result, metadata = await engine.execute_with_retry(operation)
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Optional, TypeVar

import structlog

from provisioning_retry.config import Settings
from provisioning_retry.config import settings as default_settings
from provisioning_retry.monitoring.metrics import retry_attempts_total
from provisioning_retry.pipelines.decision import RetryDecision
from provisioning_retry.pipelines.pipeline import PredicatePipeline
from provisioning_retry.retry.exceptions import RetryExhausted
from provisioning_retry.retry.metadata import RetryMetadata

T = TypeVar("T")


class RetryEngine:
    """
    Retry loop for one backend family.

    Attributes:
        pipeline: Pipeline classifying failures
        max_attempts: Total calls allowed (MAX_RETRIES + 1)
        backoff_base: Base of the exponential backoff (seconds)
        max_delay: Cap for computed backoff (seconds)
        max_hint: Cap for server and predicate delay hints (seconds)
    """

    def __init__(self, pipeline: PredicatePipeline, settings: Optional[Settings] = None):
        if settings is None:
            settings = default_settings
        self.pipeline = pipeline
        self.settings = settings
        self.max_attempts = max(1, settings.MAX_RETRIES + 1)
        self.backoff_base = settings.RETRY_BACKOFF_BASE
        self.max_delay = settings.RETRY_MAX_DELAY_SECONDS
        self.max_hint = settings.RETRY_MAX_HINT_SECONDS
        self._log = structlog.get_logger(__name__, pipeline=pipeline.name)

        self._log.info(
            "RetryEngine initialized",
            max_attempts=self.max_attempts,
            backoff_base=self.backoff_base,
            max_delay=self.max_delay,
            max_hint=self.max_hint,
        )

    def compute_delay(self, decision: RetryDecision, attempt: int) -> float:
        """
        Seconds to wait after a failed attempt.

        Args:
            decision: Retryable decision for the failure
            attempt: Attempt number that failed (1-indexed)
        """
        if decision.delay_hint is not None:
            return min(max(0.0, decision.delay_hint.total_seconds()), self.max_hint)
        try:
            backoff = self.backoff_base ** attempt
        except OverflowError:
            return self.max_delay
        return min(backoff, self.max_delay)

    async def execute_with_retry(
        self, operation: Callable[[], Awaitable[T]]
    ) -> tuple[T, RetryMetadata]:
        """
        Call an operation until it succeeds, fails permanently or runs out
        of attempts.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt

        Returns:
            Tuple of (operation result, retry metadata)

        Raises:
            Exception: The operation's own exception when it is not retryable
            RetryExhausted: Every attempt failed with a retryable error
        """
        start_time_ms = int(time.time() * 1000)
        retried_on: list[str] = []
        total_delay = 0.0
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await operation()
            except Exception as e:
                last_error = e
                decision = self.pipeline.classify(e)

                if not decision.retryable:
                    self._count("give_up")
                    self._log.warning(
                        "Operation failed with non-retryable error",
                        attempt=attempt,
                        error_type=type(e).__name__,
                        reason=decision.reason,
                    )
                    raise

                if attempt == self.max_attempts:
                    break

                delay = self.compute_delay(decision, attempt)
                retried_on.append(decision.predicate or "unknown")
                total_delay += delay
                self._count("retry")

                self._log.info(
                    f"Retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_attempts})",
                    predicate=decision.predicate,
                    reason=decision.reason,
                    delay_seconds=delay,
                )
                await asyncio.sleep(delay)
                continue

            self._count("success")
            metadata = self._metadata(attempt, retried_on, total_delay, start_time_ms)
            if retried_on:
                self._log.info(
                    "Operation succeeded after retries",
                    total_attempts=attempt,
                    total_delay_seconds=total_delay,
                )
            return result, metadata

        self._count("exhausted")
        metadata = self._metadata(self.max_attempts, retried_on, total_delay, start_time_ms)
        self._log.error(
            "Retries exhausted",
            total_attempts=metadata.total_attempts,
            retried_on=retried_on,
            final_error_type=type(last_error).__name__,
        )
        raise RetryExhausted(last_error=last_error, retry_metadata=metadata) from last_error

    def _metadata(
        self, attempts: int, retried_on: list[str], total_delay: float, start_time_ms: int
    ) -> RetryMetadata:
        return RetryMetadata(
            pipeline=self.pipeline.name,
            total_attempts=attempts,
            retried_on=list(retried_on),
            total_delay_seconds=total_delay,
            total_latency_ms=max(0, int(time.time() * 1000) - start_time_ms),
        )

    def _count(self, outcome: str) -> None:
        if self.settings.PROMETHEUS_ENABLED:
            retry_attempts_total.labels(pipeline=self.pipeline.name, outcome=outcome).inc()
