"""
PredicatePipeline: ordered evaluation of retry predicates.

Predicates are consulted in order; the first one that matches decides.
When none matches, the decision is non-retryable (fail closed). The order
is part of a pipeline's contract.

Classification is total: unrecognized error shapes and unexpected failures
inside the adapter or a predicate are logged and degrade to a non-retryable
decision. Every log line is bound to the pipeline name.
"""

from collections.abc import Iterable

import structlog

from provisioning_retry.errors.adapter import adapt
from provisioning_retry.errors.exceptions import UnclassifiableError
from provisioning_retry.errors.models import TransportError
from provisioning_retry.monitoring.metrics import (
    retry_decisions_total,
    unclassifiable_errors_total,
)
from provisioning_retry.pipelines.decision import NOT_RETRYABLE, RetryDecision
from provisioning_retry.predicates.base import RetryPredicate, Verdict


class PredicatePipeline:
    """
    Named, immutable sequence of retry predicates for one backend family.
    
    Attributes:
        name: Pipeline name (used in logs and metrics labels)
        predicates: Predicates in evaluation order
    """

    def __init__(self, name: str, predicates: Iterable[RetryPredicate]):
        self._name = name
        self._predicates: tuple[RetryPredicate, ...] = tuple(predicates)
        self._log = structlog.get_logger(__name__, pipeline=name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def predicates(self) -> tuple[RetryPredicate, ...]:
        return self._predicates

    def __repr__(self) -> str:
        names = ", ".join(p.name for p in self._predicates)
        return f"PredicatePipeline({self._name!r}, [{names}])"

    def extend(self, name: str, *predicates: RetryPredicate) -> "PredicatePipeline":
        """Return a new pipeline with extra predicates evaluated after these ones."""
        return PredicatePipeline(name, self._predicates + predicates)

    def evaluate(self, error: TransportError) -> RetryDecision:
        """
        Run the predicates against a normalized error.
        
        Args:
            error: Normalized transport error
        
        Returns:
            Decision of the first matching predicate, or non-retryable
        """
        for predicate in self._predicates:
            try:
                result = predicate.evaluate(error)
            except Exception:
                # A broken predicate must not turn classification into a crash
                self._log.exception(
                    "Retry predicate failed, treating as no match",
                    predicate=predicate.name,
                )
                continue

            if result.verdict is Verdict.NO_MATCH:
                continue

            decision = RetryDecision(
                retryable=result.verdict is Verdict.RETRY,
                delay_hint=result.delay_hint,
                reason=result.reason,
                predicate=predicate.name,
            )
            self._record(decision, error)
            return decision

        self._record(NOT_RETRYABLE, error)
        return NOT_RETRYABLE

    def classify(self, raw_error: object) -> RetryDecision:
        """
        Adapt a raw transport failure and evaluate it.
        
        Never raises: unrecognized errors, and errors whose adaptation
        blows up, are non-retryable.
        """
        try:
            error = adapt(raw_error)
        except UnclassifiableError as e:
            unclassifiable_errors_total.labels(pipeline=self._name).inc()
            self._log.debug(
                "Failing closed on unclassifiable error",
                **e.details,
            )
            return NOT_RETRYABLE
        except Exception:
            unclassifiable_errors_total.labels(pipeline=self._name).inc()
            self._log.exception(
                "Error adapter failed, treating as not retryable",
                error_type=type(raw_error).__name__,
            )
            return NOT_RETRYABLE
        return self.evaluate(error)

    def is_retryable(self, raw_error: object) -> bool:
        return self.classify(raw_error).retryable

    def _record(self, decision: RetryDecision, error: TransportError) -> None:
        predicate = decision.predicate or "default"
        retry_decisions_total.labels(
            pipeline=self._name,
            predicate=predicate,
            retryable=str(decision.retryable).lower(),
        ).inc()
        self._log.debug(
            "Retry decision",
            predicate=predicate,
            retryable=decision.retryable,
            reason=decision.reason,
            delay_hint=decision.delay_hint,
            family=error.family.value,
            status_code=error.status_code,
            rpc_code=error.rpc_code.name if error.rpc_code is not None else None,
        )
