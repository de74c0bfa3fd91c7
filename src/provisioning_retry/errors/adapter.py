"""
Error Shape Adapter.

Turns whatever the transport layer raised into a TransportError:

- httpx.HTTPStatusError: REST, body parsed as a JSON API error when possible
- API error payloads (mappings, with or without the ``error`` envelope)
- objects exposing an integer ``status_code``/``code`` (REST client errors)
- gRPC-style errors exposing ``code()``/``details()`` (RPC)
- httpx timeouts/network errors and builtin connection errors (network)

Wrapper exceptions are unwrapped through ``__cause__``/``__context__``.
Anything else raises UnclassifiableError.
"""

import json
import math
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Optional

import httpx
import structlog

from provisioning_retry.errors.exceptions import UnclassifiableError
from provisioning_retry.errors.models import ErrorFamily, RpcCode, SubError, TransportError

logger = structlog.get_logger(__name__)

# Exception chains deeper than this are not worth walking
MAX_UNWRAP_DEPTH = 8

# Longer Retry-After values are treated as garbage rather than a real hint
MAX_RETRY_AFTER_SECONDS = 24 * 60 * 60

NETWORK_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
)


def adapt(raw_error: object) -> TransportError:
    """
    Normalize a raw error into a TransportError.

    Args:
        raw_error: Exception or error payload produced by the transport layer

    Returns:
        TransportError view of the error

    Raises:
        UnclassifiableError: If neither the error nor anything it wraps is
            recognized as a REST, RPC or network failure
    """
    seen: set[int] = set()
    current: Any = raw_error

    for _ in range(MAX_UNWRAP_DEPTH):
        if current is None or id(current) in seen:
            break
        seen.add(id(current))

        adapted = _adapt_one(current)
        if adapted is not None:
            return adapted

        if not isinstance(current, BaseException):
            break
        current = current.__cause__ or current.__context__

    logger.debug("Unclassifiable error", error_type=type(raw_error).__name__)
    raise UnclassifiableError(raw_error)


def _adapt_one(candidate: Any) -> Optional[TransportError]:
    """Try every recognized shape on a single object (no unwrapping)."""
    if isinstance(candidate, TransportError):
        return candidate
    if isinstance(candidate, httpx.HTTPStatusError):
        return _from_httpx_status_error(candidate)
    if isinstance(candidate, NETWORK_EXCEPTIONS):
        return TransportError(family=ErrorFamily.NETWORK, message=str(candidate))
    if isinstance(candidate, Mapping):
        return _from_payload(candidate)
    if isinstance(candidate, (str, bytes)):
        return None

    rpc_code = _rpc_code_of(candidate)
    if rpc_code is not None:
        return TransportError(
            family=ErrorFamily.RPC,
            rpc_code=rpc_code,
            message=_rpc_message_of(candidate),
        )

    status_code = _int_attr(candidate, "status_code")
    if status_code is None:
        status_code = _int_attr(candidate, "code")
    if status_code is not None:
        message = getattr(candidate, "message", None)
        if not isinstance(message, str):
            message = str(candidate) if isinstance(candidate, BaseException) else ""
        return TransportError(
            family=ErrorFamily.REST,
            status_code=status_code,
            message=message,
            sub_errors=_parse_sub_errors(getattr(candidate, "errors", None)),
        )

    return None


def _from_httpx_status_error(error: httpx.HTTPStatusError) -> TransportError:
    response = error.response
    retry_after = parse_retry_after(response.headers.get("Retry-After"))

    try:
        text = response.text
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        text = ""

    payload = _load_json(text)
    if isinstance(payload, Mapping):
        parsed = _from_payload(payload)
        if parsed is not None:
            # The HTTP status wins over whatever the body claims
            return TransportError(
                family=ErrorFamily.REST,
                status_code=response.status_code,
                message=parsed.message,
                sub_errors=parsed.sub_errors,
                retry_after=retry_after,
            )

    return TransportError(
        family=ErrorFamily.REST,
        status_code=response.status_code,
        message=text or str(error),
        retry_after=retry_after,
    )


def _from_payload(payload: Mapping) -> Optional[TransportError]:
    """
    Parse a JSON API error body.

    Accepts ``{"error": {...}}`` as well as the bare inner object. A payload
    with an integer ``code`` is REST; one carrying only an RPC ``status``
    is RPC.
    """
    body = payload.get("error", payload)
    if isinstance(body, str):
        # {"error": "text"} style bodies carry no status of their own
        return None
    if not isinstance(body, Mapping):
        return None

    message = body.get("message")
    message = message if isinstance(message, str) else ""
    code = body.get("code")

    if isinstance(code, int) and not isinstance(code, bool):
        return TransportError(
            family=ErrorFamily.REST,
            status_code=code,
            message=message,
            sub_errors=_parse_sub_errors(body.get("errors")),
        )

    rpc_code = RpcCode.parse(body.get("status")) if body.get("status") is not None else None
    if rpc_code is not None:
        return TransportError(family=ErrorFamily.RPC, rpc_code=rpc_code, message=message)

    return None


def _parse_sub_errors(raw: Any) -> tuple[SubError, ...]:
    """Keep well-formed ``errors[]`` items, drop the rest."""
    if not isinstance(raw, (list, tuple)):
        return ()

    sub_errors: list[SubError] = []
    for item in raw:
        if isinstance(item, Mapping):
            reason, message = item.get("reason"), item.get("message")
        else:
            reason, message = getattr(item, "reason", None), getattr(item, "message", None)
        sub_errors.append(
            SubError(
                reason=reason if isinstance(reason, str) else "",
                message=message if isinstance(message, str) else "",
            )
        )
    return tuple(sub_errors)


def _rpc_code_of(candidate: Any) -> Optional[RpcCode]:
    """
    Read an RPC status off a gRPC-style error.

    gRPC errors expose ``code()`` returning a StatusCode enum; other RPC
    clients expose a ``code`` attribute holding a status name or RpcCode.
    Plain integer codes are left to the REST path.
    """
    code = getattr(candidate, "code", None)
    if callable(code):
        try:
            code = code()
        except Exception as e:
            # e.g. a closed channel; the error is then just not an RPC error
            logger.debug("RPC code() failed", error_type=type(e).__name__)
            return None
    if code is None or (isinstance(code, int) and not isinstance(code, RpcCode)):
        return None
    return RpcCode.parse(code)


def _rpc_message_of(candidate: Any) -> str:
    details = getattr(candidate, "details", None)
    if callable(details):
        try:
            details = details()
        except Exception as e:
            logger.debug("RPC details() failed", error_type=type(e).__name__)
            details = None
    if isinstance(details, str):
        return details
    message = getattr(candidate, "message", None)
    if isinstance(message, str):
        return message
    return str(candidate) if isinstance(candidate, BaseException) else ""


def _int_attr(candidate: Any, name: str) -> Optional[int]:
    value = getattr(candidate, name, None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _load_json(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def parse_retry_after(value: Optional[str]) -> Optional[timedelta]:
    """
    Parse a ``Retry-After`` header given in seconds.

    HTTP-date values, negative, non-finite or absurdly large values and
    garbage are ignored (None).
    """
    if not value:
        return None
    try:
        seconds = float(value.strip())
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(seconds) or seconds < 0 or seconds > MAX_RETRY_AFTER_SECONDS:
        return None
    return timedelta(seconds=seconds)
