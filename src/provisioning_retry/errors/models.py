"""
Normalized error models consumed by retry predicates.

TransportError is the single shape every predicate inspects, whatever the
raw exception looked like (httpx error, API error payload, gRPC-style error).
All models are frozen value objects.
"""

import re
from datetime import timedelta
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class ErrorFamily(str, Enum):
    """Which kind of backend produced the error."""

    REST = "rest"
    RPC = "rpc"
    NETWORK = "network"


class RpcCode(IntEnum):
    """
    Canonical RPC status codes.

    Numbering follows the standard RPC status space, so integers coming off
    the wire map directly onto members.
    """

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @classmethod
    def parse(cls, value: Any) -> Optional["RpcCode"]:
        """
        Best-effort conversion of a status value into an RpcCode.

        Accepts members, integers, "FAILED_PRECONDITION", "failed-precondition",
        "failed precondition", "FailedPrecondition" and enum-like objects
        exposing a ``name``. Returns None when the value is not recognized.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        if not isinstance(value, str):
            name = getattr(value, "name", None)
            if not isinstance(name, str):
                return None
            value = name

        text = value.strip()
        if not text:
            return None
        # isdigit() also accepts superscripts, which int() rejects
        if text.isdecimal():
            return cls.parse(int(text))
        if "_" not in text and "-" not in text and " " not in text:
            text = _CAMEL_BOUNDARY.sub("_", text)
        key = re.sub(r"[-\s]+", "_", text).upper()
        return cls.__members__.get(key)


class SubError(BaseModel):
    """One structured detail entry of a REST error (``errors[]`` item)."""

    model_config = ConfigDict(frozen=True)

    reason: str = Field(default="", description="Machine-readable reason, e.g. 'rateLimitExceeded'")
    message: str = Field(default="", description="Human-readable detail message")


class TransportError(BaseModel):
    """
    Normalized view of a failed remote call.

    status_code and sub_errors are mutually optional: RPC errors carry only
    rpc_code, network errors carry neither, REST errors may or may not have
    structured details.
    """

    model_config = ConfigDict(frozen=True)

    family: ErrorFamily = Field(..., description="Backend family that produced the error")
    status_code: Optional[int] = Field(default=None, description="HTTP status for REST errors")
    rpc_code: Optional[RpcCode] = Field(default=None, description="RPC status for RPC errors")
    message: str = Field(default="", description="Free-text error body, may be empty")
    sub_errors: tuple[SubError, ...] = Field(
        default=(),
        description="Structured (reason, message) details, in server order",
    )
    retry_after: Optional[timedelta] = Field(
        default=None,
        description="Server-supplied Retry-After, when present",
    )

    @classmethod
    def rest(
        cls,
        status_code: int,
        message: str = "",
        sub_errors: list[tuple[str, str]] | None = None,
        retry_after: timedelta | None = None,
    ) -> "TransportError":
        """Shorthand for building a REST-family error."""
        return cls(
            family=ErrorFamily.REST,
            status_code=status_code,
            message=message,
            sub_errors=tuple(
                SubError(reason=reason, message=detail)
                for reason, detail in (sub_errors or [])
            ),
            retry_after=retry_after,
        )

    @classmethod
    def rpc(cls, code: Any, message: str = "") -> "TransportError":
        """Shorthand for building an RPC-family error."""
        return cls(family=ErrorFamily.RPC, rpc_code=RpcCode.parse(code), message=message)

    def texts(self) -> list[str]:
        """Top-level message followed by every sub-error message."""
        texts = [self.message] if self.message else []
        texts.extend(sub.message for sub in self.sub_errors if sub.message)
        return texts
