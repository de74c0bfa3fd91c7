"""
Retry engine exceptions.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from provisioning_retry.retry.metadata import RetryMetadata


class RetryExhausted(Exception):
    """
    Raised when an operation kept failing with retryable errors until the
    attempt budget ran out.
    
    Attributes:
        last_error: Exception raised by the final attempt
        retry_metadata: Complete retry history
    """

    def __init__(self, last_error: BaseException, retry_metadata: "RetryMetadata") -> None:
        self.last_error = last_error
        self.retry_metadata = retry_metadata
        
        super().__init__(
            f"Retries exhausted after {retry_metadata.total_attempts} attempts "
            f"(pipeline '{retry_metadata.pipeline}'). "
            f"Final error: {type(last_error).__name__}: {last_error}"
        )
