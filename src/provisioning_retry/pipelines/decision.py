"""
RetryDecision: what a pipeline hands back to the retry loop.
"""

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RetryDecision(BaseModel):
    """
    Final retry decision for one error.
    
    Attributes:
        retryable: Whether the caller should reattempt the operation
        delay_hint: Suggested wait before the next attempt (None: caller's backoff)
        reason: Human-readable explanation, for logs
        predicate: Name of the predicate that matched, None for the fail-closed default
    """

    model_config = ConfigDict(frozen=True)

    retryable: bool
    delay_hint: Optional[timedelta] = Field(default=None)
    reason: Optional[str] = Field(default=None)
    predicate: Optional[str] = Field(default=None)

    @property
    def matched(self) -> bool:
        return self.predicate is not None


NOT_RETRYABLE = RetryDecision(retryable=False)
