"""
Error Shape Adapter and normalized error models.

- models.py: TransportError, SubError, ErrorFamily, RpcCode
- adapter.py: adapt() turning raw transport failures into TransportError
- exceptions.py: UnclassifiableError, UnknownPipelineError
"""

from provisioning_retry.errors.adapter import adapt, parse_retry_after
from provisioning_retry.errors.exceptions import (
    ClassificationError,
    UnclassifiableError,
    UnknownPipelineError,
)
from provisioning_retry.errors.models import ErrorFamily, RpcCode, SubError, TransportError

__all__ = [
    "adapt",
    "parse_retry_after",
    "TransportError",
    "SubError",
    "ErrorFamily",
    "RpcCode",
    "ClassificationError",
    "UnclassifiableError",
    "UnknownPipelineError",
]
