"""
Exceptions raised around error classification.

Classification itself never raises to callers: UnclassifiableError is caught
by the pipeline and turned into a non-retryable decision.
"""

from typing import Any


class ClassificationError(Exception):
    """
    Base exception for the classification layer.
    
    Carries a human-readable message plus structured details for logging.
    """
    
    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class UnclassifiableError(ClassificationError):
    """
    The adapter could not recognize the raw error as REST, RPC or network.
    
    Callers going through a pipeline never see this: it is converted into
    a fail-closed decision.
    """
    
    def __init__(self, raw_error: object):
        super().__init__(
            "Error shape not recognized",
            details={"error_type": type(raw_error).__name__},
        )
        self.raw_error = raw_error


class UnknownPipelineError(ClassificationError, KeyError):
    """Raised when a call site asks for a pipeline name that is not registered."""
    
    def __init__(self, name: str, available: list[str]):
        super().__init__(
            f"Unknown retry pipeline '{name}'",
            details={"available": available},
        )
        self.name = name
