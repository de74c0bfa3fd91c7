"""
Predicate protocol and tri-state results.

A predicate inspects one TransportError against one retry condition and
answers RETRY, GIVE_UP or NO_MATCH. NO_MATCH means "not my jurisdiction":
the pipeline moves on to the next predicate. GIVE_UP is a confident
negative that stops the pipeline.
"""

from datetime import timedelta
from enum import Enum
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from provisioning_retry.errors.models import ErrorFamily, TransportError


class Verdict(str, Enum):
    """Outcome of a single predicate."""

    RETRY = "retry"
    GIVE_UP = "give_up"
    NO_MATCH = "no_match"


class PredicateResult(BaseModel):
    """Verdict plus optional delay hint and explanation."""

    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    delay_hint: Optional[timedelta] = Field(default=None, description="Suggested wait before retrying")
    reason: Optional[str] = Field(default=None, description="Why the predicate decided this way")

    @property
    def matched(self) -> bool:
        return self.verdict is not Verdict.NO_MATCH

    @classmethod
    def retry(cls, reason: str, delay_hint: timedelta | None = None) -> "PredicateResult":
        return cls(verdict=Verdict.RETRY, reason=reason, delay_hint=delay_hint)

    @classmethod
    def give_up(cls, reason: str) -> "PredicateResult":
        return cls(verdict=Verdict.GIVE_UP, reason=reason)


NO_MATCH = PredicateResult(verdict=Verdict.NO_MATCH)


class RetryPredicate(Protocol):
    """
    Protocol for retry predicates.
    
    Implementations must be pure: the same TransportError always yields the
    same result, and evaluate() never raises for well-typed input.
    """

    name: str

    def evaluate(self, error: TransportError) -> PredicateResult:
        """
        Classify the error against this predicate's condition.
        
        Args:
            error: Normalized transport error
        
        Returns:
            PredicateResult; NO_MATCH when the error is outside this
            predicate's jurisdiction
        """
        ...


def is_rest_status(error: TransportError, status_code: int) -> bool:
    """True for REST-family errors carrying exactly this status."""
    return error.family is ErrorFamily.REST and error.status_code == status_code
