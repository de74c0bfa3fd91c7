"""
Retry metadata tracking.

RetryMetadata captures the history of one retry-loop run for logs and
callers that want to report on it.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetryMetadata:
    """
    Retry history of one operation.
    
    Attributes:
        pipeline: Name of the pipeline that classified failures
        total_attempts: Number of times the operation was called
        retried_on: Predicate names that allowed each retry, in order
        total_delay_seconds: Time spent sleeping between attempts
        total_latency_ms: Time from first attempt to final outcome (ms)
    """

    pipeline: str
    total_attempts: int
    retried_on: list[str] = field(default_factory=list)
    total_delay_seconds: float = 0.0
    total_latency_ms: int = 0

    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")
        
        if len(self.retried_on) >= self.total_attempts:
            raise ValueError("retried_on must be shorter than total_attempts")
        
        if self.total_delay_seconds < 0:
            raise ValueError("total_delay_seconds must be >= 0")
        
        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")
